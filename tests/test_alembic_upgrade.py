"""Alembic migrations: upgrade head builds the model schema; upgrade is idempotent; downgrade clears it."""

from sqlalchemy import create_engine, inspect

from apps.subscription_api.models import Base
from tests._db_bootstrap import run_alembic_downgrade_base, run_alembic_upgrade


def _tables(url: str) -> set[str]:
    eng = create_engine(url)
    try:
        return set(inspect(eng).get_table_names())
    finally:
        eng.dispose()


def test_upgrade_head_creates_model_tables(sqlite_file_url) -> None:
    run_alembic_upgrade(sqlite_file_url)
    tables = _tables(sqlite_file_url)
    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables


def test_upgrade_head_twice_no_exception(sqlite_file_url) -> None:
    run_alembic_upgrade(sqlite_file_url)
    run_alembic_upgrade(sqlite_file_url)


def test_migration_columns_match_models(sqlite_file_url) -> None:
    run_alembic_upgrade(sqlite_file_url)
    eng = create_engine(sqlite_file_url)
    try:
        insp = inspect(eng)
        for name, table in Base.metadata.tables.items():
            migrated = {c["name"] for c in insp.get_columns(name)}
            assert migrated == set(table.columns.keys()), name
    finally:
        eng.dispose()


def test_downgrade_base_drops_tables(sqlite_file_url) -> None:
    run_alembic_upgrade(sqlite_file_url)
    run_alembic_downgrade_base(sqlite_file_url)
    assert not (set(Base.metadata.tables) & _tables(sqlite_file_url))
