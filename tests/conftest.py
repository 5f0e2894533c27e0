"""Pytest fixtures for root-level tests (schema, architecture, cron)."""

import pytest


@pytest.fixture
def sqlite_file_url(tmp_path) -> str:
    """URL of a throwaway SQLite file, for migrations that must not touch the shared engine."""
    return f"sqlite+pysqlite:///{tmp_path / 'alembic_test.db'}"
