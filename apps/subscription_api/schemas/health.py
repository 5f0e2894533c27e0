"""Health check response schema."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Liveness plus the size of this process's validation cache."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    ok: bool
    version: str
    time: str
    cache_entries: int = Field(..., alias="cacheEntries")
