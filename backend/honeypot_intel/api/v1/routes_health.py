# backend/honeypot_intel/api/v1/routes_health.py

from fastapi import APIRouter

from honeypot_intel.core.config import settings
from honeypot_intel.services.events.event_store_service import event_store_service

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict:
    """
    Liveness check plus the state of the local event snapshot
    (how much loaded, and whether it is the placeholder dataset).
    """
    snapshot = event_store_service.get_snapshot()
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "adapter": settings.DEFAULT_ADAPTER,
        "events": len(snapshot.events),
        "placeholder": snapshot.is_placeholder,
        "files_read": snapshot.context.files_read,
        "lines_dropped": snapshot.context.lines_dropped,
        "timestamps_defaulted": snapshot.context.timestamps_defaulted,
    }
