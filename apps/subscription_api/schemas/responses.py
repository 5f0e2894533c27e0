"""Response schemas for validation and cache endpoints. Serialized by alias (camelCase)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from apps.subscription_api.services.validation_cache import BatchItemError, CachedValidation, CacheInspection


class ValidationOut(BaseModel):
    """Flattened ValidationResult plus cache metadata. reason only present when isValid is false."""

    model_config = ConfigDict(populate_by_name=True)

    company_id: Any = Field(..., alias="companyId")
    bot_id: Any = Field(..., alias="botId")
    is_valid: bool = Field(..., alias="isValid")
    reason: str | None = None
    subscription_status: str = Field(..., alias="subscriptionStatus")
    plan_level: str = Field(..., alias="planLevel")
    storage_used: int = Field(..., alias="storageUsed")
    storage_limit: int = Field(..., alias="storageLimit")
    features: dict[str, bool]
    timestamp: str
    cached: bool
    cache_age: int | None = Field(None, alias="cacheAge", description="Milliseconds since the entry was stored")

    @classmethod
    def from_cached(cls, served: CachedValidation) -> "ValidationOut":
        result = served.result
        facts = result.facts
        return cls(
            company_id=result.tenant_key.company_id,
            bot_id=result.tenant_key.bot_id,
            is_valid=result.is_valid,
            reason=result.reason,
            subscription_status=facts.subscription_status,
            plan_level=facts.plan_level,
            storage_used=facts.storage_used_bytes,
            storage_limit=facts.storage_limit_bytes,
            features=dict(facts.features),
            timestamp=result.computed_at.isoformat(),
            cached=served.cached,
            cache_age=served.cache_age_ms if served.cached else None,
        )


class BatchItemErrorOut(BaseModel):
    """A failed batch item. Carries error instead of a validation payload."""

    model_config = ConfigDict(populate_by_name=True)

    company_id: Any = Field(None, alias="companyId")
    bot_id: Any = Field(None, alias="botId")
    error: str

    @classmethod
    def from_error(cls, err: BatchItemError) -> "BatchItemErrorOut":
        return cls(company_id=err.company_id, bot_id=err.bot_id, error=err.error)


class BatchValidationOut(BaseModel):
    """Index-aligned with the request's validations list."""

    validations: list[ValidationOut | BatchItemErrorOut]


class CacheAgeOut(BaseModel):
    age: int = Field(..., description="Milliseconds since stored")
    valid: bool = Field(..., description="Still within TTL")


class CacheStatsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cache_size: int = Field(..., alias="cacheSize")
    cache_keys: list[str] = Field(..., alias="cacheKeys")
    cache_ages: list[CacheAgeOut] = Field(..., alias="cacheAges")

    @classmethod
    def from_inspection(cls, inspection: CacheInspection) -> "CacheStatsOut":
        return cls(
            cache_size=inspection.size,
            cache_keys=list(inspection.keys),
            cache_ages=[CacheAgeOut(age=a.age_ms, valid=a.valid) for a in inspection.ages],
        )


class ClearCacheOut(BaseModel):
    message: str
    cleared: int
