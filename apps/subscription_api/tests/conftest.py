"""Pytest fixtures for subscription API tests."""

import threading
import time

import pytest
from fastapi.testclient import TestClient

from apps.subscription_api.main import app
from apps.subscription_api.services.company_context import get_validation_cache
from apps.subscription_api.services.plans import DEFAULT_STORAGE_LIMIT_BYTES, PLAN_STARTER, STATUS_ACTIVE
from apps.subscription_api.services.subscription_store import (
    CompanyNotFoundError,
    StoreUnavailableError,
    SubscriptionFacts,
)
from apps.subscription_api.services.validation_cache import ValidationCache


class FakeSubscriptionStore:
    """In-memory SubscriptionStore. Counts fetches per company; thread-safe for batch tests."""

    def __init__(self) -> None:
        self._facts: dict[str, SubscriptionFacts] = {}
        self._users: dict[str, int] = {}
        self.unavailable: set[str] = set()
        self.broken: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def put(
        self,
        company_id,
        status: str | None = STATUS_ACTIVE,
        plan_level: str | None = PLAN_STARTER,
        storage_used: int | None = 0,
        storage_limit: int | None = DEFAULT_STORAGE_LIMIT_BYTES,
        users: int = 0,
    ) -> None:
        self._facts[str(company_id)] = SubscriptionFacts.from_row(status, plan_level, storage_used, storage_limit)
        self._users[str(company_id)] = users

    def fetch_count(self, company_id) -> int:
        with self._lock:
            return self.calls.count(str(company_id))

    def fetch_facts(self, company_id) -> SubscriptionFacts:
        cid = str(company_id)
        with self._lock:
            self.calls.append(cid)
        if cid in self.delays:
            time.sleep(self.delays[cid])
        if cid in self.unavailable:
            raise StoreUnavailableError("store down")
        if cid in self.broken:
            raise self.broken[cid]
        if cid not in self._facts:
            raise CompanyNotFoundError(company_id)
        return self._facts[cid]

    def count_active_users(self, company_id) -> int:
        return self._users.get(str(company_id), 0)


class FakeClock:
    """Controllable time source (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> FakeSubscriptionStore:
    return FakeSubscriptionStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(store, clock) -> ValidationCache:
    return ValidationCache(store, ttl_seconds=24 * 60 * 60, clock=clock, max_workers=4)


@pytest.fixture
def client(cache):
    """TestClient whose routes use the fake-store cache."""
    app.dependency_overrides[get_validation_cache] = lambda: cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_validation_cache, None)


@pytest.fixture
def sql_client(db):
    """TestClient against the real app wiring (SqlSubscriptionStore on the test DB)."""
    app.state.validation_cache.invalidate()
    yield TestClient(app)
    app.state.validation_cache.invalidate()
