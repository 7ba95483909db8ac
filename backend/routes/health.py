"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Depends

from config import settings
from errors import ComicError
from routes.comics import get_xkcd_service
from services.xkcd import XKCDService

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "comics-api"


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": SERVICE_NAME, "commit": settings.git_sha}


@router.get("/health")
async def health(service: XKCDService = Depends(get_xkcd_service)) -> dict:
    """Deep health check that verifies the xkcd API is reachable."""
    result = {"status": "ok", "service": SERVICE_NAME, "commit": settings.git_sha, "upstream": "not_tested"}

    try:
        latest = await service.get_latest()
        result["upstream"] = "connected"
        result["latest_id"] = latest["id"]
    except ComicError as e:
        logger.warning("xkcd health check failed: %s", e)
        result["upstream"] = "error"
        result["upstream_error"] = str(e)

    return result
