"""
Analytics Router
Page view tracking and the aggregate stats snapshot behind the dashboard
"""
import asyncio
from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from core.config import RECENT_ROWS_LIMIT, logger
from core.errors import StorageError
from core.store import Store, get_store
from utils.request_meta import clean_str, get_client_ip, get_user_agent, read_payload

router = APIRouter(prefix="/api", tags=["analytics"])


# ============ Pydantic Models ============

class TrackPageView(BaseModel):
    referrer: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    page_url: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _trim(cls, v):
        return clean_str(v)


# ============ Public Tracking Endpoints ============

@router.post("/pageview")
async def track_page_view(request: Request, store: Store = Depends(get_store)):
    """Track one landing page load (called from frontend)"""
    data = TrackPageView.model_validate(await read_payload(request))
    fields = data.model_dump()
    fields["ip_address"] = get_client_ip(request)
    fields["user_agent"] = get_user_agent(request)

    try:
        view_id = await asyncio.to_thread(store.insert_page_view, **fields)
    except StorageError as ex:
        logger.error(f"[pageview] Error inserting page view: {ex}")
        return JSONResponse({"success": False, "message": "Internal server error."}, status_code=500)

    return {"success": True, "viewId": view_id}


# ============ Dashboard Endpoints ============

@router.get("/stats")
async def get_stats(store: Store = Depends(get_store)):
    """
    Snapshot of lead and page view stats.
    Five independent reads run concurrently; a read that fails leaves its
    field at the default instead of failing the whole response.
    """
    stats = {
        "totalLeads": 0,
        "totalPageViews": 0,
        "variants": {},
        "recentLeads": [],
        "recentPageViews": [],
    }

    queries = {
        "totalLeads": (store.count_leads,),
        "totalPageViews": (store.count_page_views,),
        "variants": (store.lead_variant_counts,),
        "recentLeads": (store.recent_leads, RECENT_ROWS_LIMIT),
        "recentPageViews": (store.recent_page_views, RECENT_ROWS_LIMIT),
    }
    keys = list(queries)
    results = await asyncio.gather(
        *(asyncio.to_thread(*queries[k]) for k in keys),
        return_exceptions=True,
    )

    for key, result in zip(keys, results):
        if isinstance(result, Exception):
            logger.warning(f"[stats] {key} query failed, using default: {result}")
            continue
        stats[key] = result

    return stats
