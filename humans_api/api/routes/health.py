"""Health check API routes.

Provides:
- GET /health: configuration status of the sync dependencies (public)
- GET /health/ping: lightweight 200 for external uptime monitors
"""

import logging
import time
from typing import Any

from fastapi import APIRouter, status

from humans_api.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

_start_time = time.monotonic()
_VERSION = "1.0.0"


@router.get("", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, Any]:
    """Report which external dependencies are configured.

    No authentication required.
    """
    services = {
        "crm_database": bool(settings.SUPABASE_URL),
        "website_database": settings.website_store_configured,
        "front": settings.front_configured,
    }
    return {
        "status": "healthy" if all(services.values()) else "degraded",
        "services": services,
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
        "version": _VERSION,
    }


@router.get("/ping", status_code=status.HTTP_200_OK)
async def ping() -> dict[str, str]:
    """Lightweight liveness probe."""
    return {"status": "ok"}
