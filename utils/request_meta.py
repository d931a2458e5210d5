"""
Request helpers shared by the ingestion routers
"""
import json
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from core.config import logger


def get_client_ip(request: Request) -> Optional[str]:
    """Prefer X-Forwarded-For (first hop) so the address survives a reverse proxy"""
    xff = (request.headers.get("x-forwarded-for") or "").strip()
    if xff:
        first = xff.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "") or ""


def clean_str(value: Any) -> Optional[str]:
    """Trim to a non-empty string, else None"""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Read a JSON or form-encoded body as a flat dict.
    Missing, empty or unparsable bodies come back as {}.
    """
    ctype = (request.headers.get("content-type") or "").lower()
    try:
        if "application/x-www-form-urlencoded" in ctype or "multipart/form-data" in ctype:
            try:
                form = await request.form()
            except (HTTPException, MultiPartException) as ex:
                # e.g. multipart without a boundary
                logger.warning(f"[request] Ignoring malformed form body: {getattr(ex, 'detail', None) or ex}")
                return {}
            return {k: v for k, v in form.items() if isinstance(v, str)}
        raw = await request.body()
        if not raw or not raw.strip():
            return {}
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as ex:
        logger.warning(f"[request] Ignoring unparsable body: {ex}")
        return {}
    return data if isinstance(data, dict) else {}
