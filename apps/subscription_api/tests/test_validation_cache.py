"""ValidationCache: read-through caching, TTL freshness, invalidation, batch."""

import threading
import time

import pytest

from apps.subscription_api.services.plans import GIB
from apps.subscription_api.services.policy import REASON_STORAGE_EXCEEDED
from apps.subscription_api.services.subscription_store import CompanyNotFoundError, StoreUnavailableError
from apps.subscription_api.services.tenant_key import TenantKey
from apps.subscription_api.services.validation_cache import (
    ERROR_COMPANY_NOT_FOUND,
    ERROR_VALIDATION_FAILED,
    BatchItemError,
    CachedValidation,
    ValidationCache,
)

DAY = 24 * 60 * 60


def test_second_call_within_ttl_is_cached(cache, store, clock) -> None:
    store.put(1)
    key = TenantKey(1, 1)

    first = cache.validate(key)
    clock.advance(0.010)
    second = cache.validate(key)

    assert first.cached is False
    assert second.cached is True
    assert second.cache_age_ms == 10
    assert second.result == first.result
    assert store.fetch_count(1) == 1


def test_fresh_entry_ignores_changed_facts(cache, store, clock) -> None:
    store.put(1, storage_used=0)
    key = TenantKey(1, 1)
    cache.validate(key)

    store.put(1, storage_used=3 * GIB)
    clock.advance(DAY - 1)
    served = cache.validate(key)

    assert served.cached is True
    assert served.result.is_valid is True


def test_expired_entry_refetches_and_reflects_new_facts(cache, store, clock) -> None:
    store.put(1, storage_used=0)
    key = TenantKey(1, 1)
    assert cache.validate(key).result.is_valid is True

    store.put(1, storage_used=3 * GIB)
    clock.advance(DAY + 1)
    served = cache.validate(key)

    assert served.cached is False
    assert served.result.is_valid is False
    assert served.result.reason == REASON_STORAGE_EXCEEDED
    assert store.fetch_count(1) == 2


def test_entry_is_stale_exactly_at_ttl(cache, store, clock) -> None:
    store.put(1)
    key = TenantKey(1, 1)
    cache.validate(key)

    clock.advance(DAY)
    assert cache.validate(key).cached is False


def test_refresh_restarts_ttl(cache, store, clock) -> None:
    store.put(1)
    key = TenantKey(1, 1)
    cache.validate(key)
    clock.advance(DAY + 5)
    cache.validate(key)

    clock.advance(DAY - 5)
    assert cache.validate(key).cached is True


def test_not_found_is_raised_and_not_cached(cache, store) -> None:
    key = TenantKey(99, 1)
    with pytest.raises(CompanyNotFoundError):
        cache.validate(key)
    assert len(cache) == 0

    with pytest.raises(CompanyNotFoundError):
        cache.validate(key)
    assert store.fetch_count(99) == 2


def test_store_failure_writes_nothing(cache, store) -> None:
    store.put(1)
    store.unavailable.add("1")
    with pytest.raises(StoreUnavailableError):
        cache.validate(TenantKey(1, 1))
    assert len(cache) == 0

    store.unavailable.clear()
    assert cache.validate(TenantKey(1, 1)).cached is False


def test_failed_refresh_leaves_stale_entry_in_place(cache, store, clock) -> None:
    store.put(1)
    key = TenantKey(1, 1)
    cache.validate(key)
    clock.advance(DAY + 1)
    store.unavailable.add("1")

    with pytest.raises(StoreUnavailableError):
        cache.validate(key)

    inspection = cache.inspect()
    assert inspection.keys == ["1-1"]
    assert inspection.ages[0].valid is False


def test_invalidate_single_key_forces_miss(cache, store) -> None:
    store.put(1)
    key = TenantKey(1, 1)
    cache.validate(key)
    cache.validate(TenantKey(1, 2))

    assert cache.invalidate(key) == 1
    assert cache.validate(key).cached is False
    assert cache.validate(TenantKey(1, 2)).cached is True


def test_invalidate_absent_key_is_noop(cache) -> None:
    assert cache.invalidate(TenantKey(5, 5)) == 0


def test_invalidate_all(cache, store) -> None:
    store.put(1)
    store.put(2)
    cache.validate(TenantKey(1, 1))
    cache.validate(TenantKey(2, 1))

    assert cache.invalidate() == 2
    assert len(cache) == 0
    assert cache.validate(TenantKey(1, 1)).cached is False


def test_bots_of_one_company_are_cached_separately(cache, store) -> None:
    store.put(1)
    cache.validate(TenantKey(1, 1))
    assert cache.validate(TenantKey(1, 2)).cached is False
    assert store.fetch_count(1) == 2


def test_string_and_int_ids_hit_same_entry(cache, store) -> None:
    store.put(1)
    cache.validate(TenantKey(1, 2))
    assert cache.validate(TenantKey("1", "2")).cached is True


def test_inspect_reports_keys_and_ages(cache, store, clock) -> None:
    store.put(1)
    store.put(2)
    cache.validate(TenantKey(1, 1))
    clock.advance(DAY - 10)
    cache.validate(TenantKey(2, 3))
    clock.advance(20)

    inspection = cache.inspect()
    ages = dict(zip(inspection.keys, inspection.ages))

    assert inspection.size == 2
    assert set(inspection.keys) == {"1-1", "2-3"}
    assert ages["1-1"].valid is False
    assert ages["1-1"].age_ms == (DAY + 10) * 1000
    assert ages["2-3"].valid is True
    assert ages["2-3"].age_ms == 20_000


def test_inspect_does_not_evict_stale_entries(cache, store, clock) -> None:
    store.put(1)
    cache.validate(TenantKey(1, 1))
    clock.advance(DAY * 3)
    assert cache.inspect().size == 1
    assert len(cache) == 1


def test_batch_is_index_aligned_with_mixed_failures(cache, store) -> None:
    store.put(1)
    store.put(3, status="canceled")
    store.put(4)
    store.unavailable.add("4")

    results = cache.validate_batch(
        [
            {"companyId": 1, "botId": 1},
            {"companyId": 2, "botId": 1},
            {"companyId": 3, "botId": 1},
            {"companyId": 4, "botId": 1},
            {"botId": 1},
        ]
    )

    assert len(results) == 5
    assert isinstance(results[0], CachedValidation) and results[0].result.is_valid is True
    assert isinstance(results[1], BatchItemError)
    assert (results[1].company_id, results[1].error, results[1].status_code) == (2, ERROR_COMPANY_NOT_FOUND, 404)
    assert isinstance(results[2], CachedValidation) and results[2].result.is_valid is False
    assert isinstance(results[3], BatchItemError)
    assert (results[3].error, results[3].status_code) == (ERROR_VALIDATION_FAILED, 500)
    assert isinstance(results[4], BatchItemError) and results[4].status_code == 400


def test_batch_order_survives_out_of_order_completion(store, clock) -> None:
    cache = ValidationCache(store, clock=clock, max_workers=4)
    for cid, delay in ((1, 0.05), (2, 0.0), (3, 0.03), (4, 0.01)):
        store.put(cid)
        store.delays[str(cid)] = delay

    results = cache.validate_batch([TenantKey(cid, 9) for cid in (1, 2, 3, 4)])

    assert [r.result.tenant_key.company_id for r in results] == [1, 2, 3, 4]


def test_batch_shares_cache_with_single_validate(cache, store) -> None:
    store.put(1)
    cache.validate(TenantKey(1, 1))
    results = cache.validate_batch([{"companyId": 1, "botId": 1}, {"companyId": 1, "botId": 2}])
    assert results[0].cached is True
    assert results[1].cached is False


def test_empty_batch(cache) -> None:
    assert cache.validate_batch([]) == []


def test_single_worker_batch_runs_inline(store, clock) -> None:
    store.put(1)
    cache = ValidationCache(store, clock=clock, max_workers=1)
    results = cache.validate_batch([TenantKey(1, 1), TenantKey(1, 1)])
    assert results[0].cached is False
    assert results[1].cached is True


def test_concurrent_validates_leave_one_entry(cache, store) -> None:
    store.put(1)
    errors: list[Exception] = []

    def worker() -> None:
        try:
            for _ in range(20):
                cache.validate(TenantKey(1, 1))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(cache) == 1
    assert cache.validate(TenantKey(1, 1)).cached is True


def test_batch_turns_unexpected_store_error_into_item_error(cache, store) -> None:
    store.put(1)
    store.broken["2"] = OverflowError("Python int too large to convert to SQLite INTEGER")

    results = cache.validate_batch([TenantKey(1, 1), TenantKey(2, 1), TenantKey(1, 3)])

    assert len(results) == 3
    assert isinstance(results[0], CachedValidation)
    assert results[1] == BatchItemError(company_id=2, bot_id=1, error=ERROR_VALIDATION_FAILED, status_code=500)
    assert isinstance(results[2], CachedValidation)
    assert len(cache) == 2


def test_batch_rejects_malformed_ids_at_their_index(cache, store) -> None:
    store.put(1)

    results = cache.validate_batch(
        [{"companyId": 1, "botId": 1}, {"companyId": 1, "botId": 2.5}, {"companyId": 1, "botId": {"id": 3}}]
    )

    assert isinstance(results[0], CachedValidation)
    for err in results[1:]:
        assert isinstance(err, BatchItemError)
        assert err.status_code == 400
    assert store.fetch_count(1) == 1


def test_default_clock_is_monotonic(store) -> None:
    assert ValidationCache(store)._clock is time.monotonic
