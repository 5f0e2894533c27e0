"""Health check endpoint. No auth required."""

import os
from datetime import datetime, timezone

from fastapi import APIRouter

from apps.subscription_api.schemas.health import HealthResponse
from apps.subscription_api.services.company_context import ValidationCacheDep

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(cache: ValidationCacheDep) -> HealthResponse:
    """ok, version (GIT_SHA or dev), current UTC time and cached validation count."""
    return HealthResponse(
        ok=True,
        version=os.getenv("GIT_SHA", "").strip() or "dev",
        time=datetime.now(timezone.utc).isoformat(),
        cache_entries=len(cache),
    )
