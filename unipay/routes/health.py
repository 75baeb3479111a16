from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from unipay.config import settings
from unipay.providers.factory import default_registry

router = APIRouter()

SERVICE_STARTED_AT = datetime.now(timezone.utc)


@router.get("/health")
async def health() -> dict[str, Any]:
    """Simple health check endpoint for load balancers."""
    uptime = datetime.now(timezone.utc) - SERVICE_STARTED_AT
    return {
        "status": "ok",
        "provider": settings.provider,
        "registered_providers": default_registry.get_registered_providers(),
        "uptime_seconds": int(uptime.total_seconds()),
    }
