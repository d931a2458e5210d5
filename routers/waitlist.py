import asyncio
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from core.config import HEADLINE_VARIANTS, logger
from core.errors import StorageError, ValidationError
from core.store import Store, get_store
from utils.notifications import schedule_lead_notification
from utils.request_meta import clean_str, read_payload


class WaitlistPayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    ab_headline_variant: Optional[str] = None

    @field_validator("name", "email", "ab_headline_variant", mode="before")
    @classmethod
    def _trim(cls, v):
        return clean_str(v)

    def require_contact(self):
        if not self.name or not self.email:
            raise ValidationError("Name and email are required.")


router = APIRouter(prefix="/api", tags=["waitlist"])  # e.g. POST /api/waitlist


@router.post("/waitlist")
async def join_waitlist(request: Request, store: Store = Depends(get_store)):
    payload = WaitlistPayload.model_validate(await read_payload(request))
    try:
        payload.require_contact()
    except ValidationError as ex:
        return JSONResponse({"success": False, "message": str(ex)}, status_code=400)

    try:
        lead_id = await asyncio.to_thread(store.insert_lead, payload.name, payload.email, payload.ab_headline_variant)
    except ValidationError as ex:
        return JSONResponse({"success": False, "message": str(ex)}, status_code=400)
    except StorageError as ex:
        logger.error(f"[waitlist] Error inserting lead: {ex}")
        return JSONResponse({"success": False, "message": "Internal server error."}, status_code=500)

    # Never awaited; outcome only reaches the log
    schedule_lead_notification(payload.name, payload.email, payload.ab_headline_variant)
    return {"success": True, "message": "Successfully joined waitlist.", "leadId": lead_id}


@router.get("/variants")
async def list_variants():
    """Headline variants the landing page rotates through"""
    return {"variants": list(HEADLINE_VARIANTS)}
