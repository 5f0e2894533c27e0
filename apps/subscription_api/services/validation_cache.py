"""In-process, TTL-based read-through cache for subscription validation.

Sits in front of the subscription store to absorb high-frequency polling from
the ingestion service: one store lookup per (company, bot) per TTL window.

Staleness is evaluated at read time; entries are never evicted in the
background, only refreshed on a stale read or removed by invalidate().
Two concurrent misses for the same key may both hit the store; last write wins.
"""

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from apps.subscription_api.services.policy import evaluate
from apps.subscription_api.services.subscription_store import (
    CompanyNotFoundError,
    StoreUnavailableError,
    SubscriptionFacts,
    SubscriptionStore,
)
from apps.subscription_api.services.tenant_key import TenantKey, TenantKeyRequiredError, require_tenant_key

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60

ERROR_COMPANY_NOT_FOUND = "Company not found"
ERROR_VALIDATION_FAILED = "Failed to validate subscription"


@dataclass(frozen=True)
class ValidationResult:
    """Policy verdict for a tenant. reason is set iff is_valid is False."""

    tenant_key: TenantKey
    is_valid: bool
    reason: str | None
    facts: SubscriptionFacts
    computed_at: datetime


@dataclass(frozen=True)
class CacheEntry:
    result: ValidationResult
    stored_at: float


@dataclass(frozen=True)
class CachedValidation:
    """A ValidationResult as served: cached/cache_age_ms are response metadata only."""

    result: ValidationResult
    cached: bool
    cache_age_ms: int = 0


@dataclass(frozen=True)
class BatchItemError:
    """Per-item batch failure, reported at the failing item's index."""

    company_id: Any
    bot_id: Any
    error: str
    status_code: int


@dataclass(frozen=True)
class EntryAge:
    age_ms: int
    valid: bool


@dataclass(frozen=True)
class CacheInspection:
    size: int
    keys: list[str]
    ages: list[EntryAge]


def _age_ms(now: float, stored_at: float) -> int:
    return int(round((now - stored_at) * 1000))


class ValidationCache:
    """Subscription validation engine: policy over store facts, cached per TenantKey.

    Construct one per process (or per test) and inject it; there is no module-level cache.
    stored_at comes from the clock (time.monotonic by default), not wall time.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        max_workers: int = 8,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._max_workers = max(1, max_workers)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self._ttl_seconds

    def validate(self, key: TenantKey) -> CachedValidation:
        """Validate a tenant, serving from cache when the entry is within TTL.

        Raises CompanyNotFoundError or StoreUnavailableError from the store; nothing is cached then.
        """
        return self._validate_one(key)

    def _validate_one(self, key: TenantKey) -> CachedValidation:
        cache_key = key.cache_key
        with self._lock:
            entry = self._entries.get(cache_key)
            now = self._clock()
        if entry is not None and self._is_fresh(entry, now):
            logger.debug("Subscription cache HIT for %s", cache_key)
            return CachedValidation(result=entry.result, cached=True, cache_age_ms=_age_ms(now, entry.stored_at))

        logger.debug("Subscription cache MISS for %s", cache_key)
        facts = self._store.fetch_facts(key.company_id)
        decision = evaluate(facts)
        result = ValidationResult(
            tenant_key=key,
            is_valid=decision.is_valid,
            reason=decision.reason,
            facts=facts,
            computed_at=datetime.now(timezone.utc),
        )
        with self._lock:
            stored_at = self._clock()
            self._entries[cache_key] = CacheEntry(result=result, stored_at=stored_at)
        return CachedValidation(result=result, cached=False)

    def _validate_item(self, item: Any) -> CachedValidation | BatchItemError:
        company_id, bot_id = _item_ids(item)
        try:
            if not isinstance(item, TenantKey):
                item = require_tenant_key(company_id, bot_id)
            return self._validate_one(item)
        except TenantKeyRequiredError as e:
            return BatchItemError(company_id=company_id, bot_id=bot_id, error=str(e), status_code=400)
        except CompanyNotFoundError:
            return BatchItemError(company_id=company_id, bot_id=bot_id, error=ERROR_COMPANY_NOT_FOUND, status_code=404)
        except StoreUnavailableError:
            logger.warning("Batch validation store failure for %s-%s", company_id, bot_id)
            return BatchItemError(company_id=company_id, bot_id=bot_id, error=ERROR_VALIDATION_FAILED, status_code=500)
        except Exception:
            logger.exception("Batch validation failed for %s-%s", company_id, bot_id)
            return BatchItemError(company_id=company_id, bot_id=bot_id, error=ERROR_VALIDATION_FAILED, status_code=500)

    def validate_batch(self, items: Sequence[Any]) -> list[CachedValidation | BatchItemError]:
        """Validate many tenants independently. Output index i corresponds to input index i.

        Items are TenantKeys or {companyId, botId} mappings; a failing item yields a
        BatchItemError at its index and never aborts the batch.
        """
        if not items:
            return []
        workers = min(self._max_workers, len(items))
        if workers == 1:
            return [self._validate_item(item) for item in items]
        with ThreadPoolExecutor(max_workers=workers) as ex:
            return list(ex.map(self._validate_item, items))

    def invalidate(self, key: TenantKey | None = None) -> int:
        """Drop one entry (no-op if absent) or, with no key, all entries. Returns count removed."""
        with self._lock:
            if key is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                removed = 1 if self._entries.pop(key.cache_key, None) is not None else 0
        logger.info("Subscription cache invalidated key=%s removed=%d", key.cache_key if key else "*", removed)
        return removed

    def inspect(self) -> CacheInspection:
        """Entry count, keys and per-entry age/freshness. Read-only."""
        with self._lock:
            now = self._clock()
            items = list(self._entries.items())
        return CacheInspection(
            size=len(items),
            keys=[k for k, _ in items],
            ages=[EntryAge(age_ms=_age_ms(now, e.stored_at), valid=self._is_fresh(e, now)) for _, e in items],
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _item_ids(item: Any) -> tuple[Any, Any]:
    if isinstance(item, TenantKey):
        return item.company_id, item.bot_id
    if isinstance(item, dict):
        return item.get("companyId"), item.get("botId")
    return None, None
