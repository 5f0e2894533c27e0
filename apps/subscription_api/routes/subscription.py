"""Subscription validation endpoints: /subscription/validate-daily, validate-batch, cache-stats, clear-cache.

Public: called by the ingestion service, which polls once per (company, bot) before processing.
Policy rejections are 200 responses with isValid false; only request/lookup failures are errors.
"""

import logging

from fastapi import APIRouter, HTTPException

from apps.subscription_api.schemas.requests import ClearCacheRequest, ValidateBatchRequest, ValidateDailyRequest
from apps.subscription_api.schemas.responses import (
    BatchItemErrorOut,
    BatchValidationOut,
    CacheStatsOut,
    ClearCacheOut,
    ValidationOut,
)
from apps.subscription_api.services.company_context import ValidationCacheDep
from apps.subscription_api.services.subscription_store import CompanyNotFoundError
from apps.subscription_api.services.tenant_key import TenantKeyRequiredError, require_tenant_key
from apps.subscription_api.services.validation_cache import (
    ERROR_COMPANY_NOT_FOUND,
    ERROR_VALIDATION_FAILED,
    BatchItemError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

VALIDATIONS_REQUIRED_MESSAGE = "Validations array is required"


@router.post("/validate-daily", response_model=ValidationOut, response_model_exclude_none=True)
def validate_daily(cache: ValidationCacheDep, body: ValidateDailyRequest | None = None) -> ValidationOut:
    """Validate one (company, bot). Served from cache within TTL; cacheAge (ms) present on hits."""
    body = body or ValidateDailyRequest()
    try:
        key = require_tenant_key(body.company_id, body.bot_id)
        served = cache.validate(key)
    except TenantKeyRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CompanyNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_COMPANY_NOT_FOUND)
    except Exception:
        logger.exception("Subscription validation failed company_id=%s bot_id=%s", body.company_id, body.bot_id)
        raise HTTPException(status_code=500, detail=ERROR_VALIDATION_FAILED)
    return ValidationOut.from_cached(served)


@router.post("/validate-batch", response_model=BatchValidationOut, response_model_exclude_none=True)
def validate_batch(cache: ValidationCacheDep, body: ValidateBatchRequest | None = None) -> BatchValidationOut:
    """Validate many (company, bot) pairs. Output is index-aligned; failed items carry error."""
    if body is None or not isinstance(body.validations, list):
        raise HTTPException(status_code=400, detail=VALIDATIONS_REQUIRED_MESSAGE)
    results = cache.validate_batch(body.validations)
    return BatchValidationOut(
        validations=[
            BatchItemErrorOut.from_error(r) if isinstance(r, BatchItemError) else ValidationOut.from_cached(r)
            for r in results
        ]
    )


@router.get("/cache-stats", response_model=CacheStatsOut)
def cache_stats(cache: ValidationCacheDep) -> CacheStatsOut:
    """Entry count, keys ('<company>-<bot>') and per-entry age (ms) / freshness."""
    return CacheStatsOut.from_inspection(cache.inspect())


@router.post("/clear-cache", response_model=ClearCacheOut)
def clear_cache(cache: ValidationCacheDep, body: ClearCacheRequest | None = None) -> ClearCacheOut:
    """Drop one entry when both ids are given, otherwise the whole cache."""
    body = body or ClearCacheRequest()
    try:
        key = require_tenant_key(body.company_id, body.bot_id)
    except TenantKeyRequiredError:
        key = None
    cleared = cache.invalidate(key)
    message = f"Cache cleared for {key.cache_key}" if key is not None else "Entire cache cleared"
    return ClearCacheOut(message=message, cleared=cleared)
