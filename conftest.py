"""Root conftest: test env and DB reset apply to ALL test paths (tests/, apps/subscription_api/tests/)."""

import os

import pytest

# Must run before apps.subscription_api.config is imported (engine is built at import).
os.environ.setdefault("ENV", "test")
os.environ.setdefault("PYTEST_RUNNING", "1")
os.environ["DATABASE_URL"] = os.environ.get("DATABASE_TEST_URL") or "sqlite+pysqlite:///:memory:"
os.environ.setdefault("SCHEMA_AUTHORITY", "ensure_tables")
os.environ.pop("JWT_SECRET", None)


@pytest.fixture
def db():
    """Fresh schema for one test. SQLite in-memory by default; DATABASE_TEST_URL to point elsewhere."""
    from apps.subscription_api.db import drop_tables, engine, ensure_tables

    drop_tables(bind=engine)
    ensure_tables(bind=engine)
    yield engine
    drop_tables(bind=engine)
