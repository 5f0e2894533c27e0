"""Database session factory and bootstrap."""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from apps.subscription_api.config import config
from apps.subscription_api.models import Base


def _engine_kwargs(url: str) -> dict:
    """SQLite in-memory must share one connection across threads or each session sees an empty DB."""
    if url.strip().lower().startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO, **_engine_kwargs(config.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@contextmanager
def get_db() -> Generator[Session, None, None]:
    """Provide a transactional scope for DB operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ensure_tables(bind=None) -> None:
    """Create all tables if they do not exist. Idempotent (checkfirst=True).

    Postgres schema is owned by Alembic; create_all only runs there when
    SCHEMA_AUTHORITY=ensure_tables. SQLite (dev, tests) always uses create_all.
    """
    bind = bind if bind is not None else engine
    is_postgres = bind.url.get_backend_name() == "postgresql"
    authority = (os.environ.get("SCHEMA_AUTHORITY") or "alembic").strip().lower()
    if is_postgres and authority != "ensure_tables":
        return
    Base.metadata.create_all(bind=bind, checkfirst=True)


def drop_tables(bind=None) -> None:
    """Drop all model tables. Test-only helper for resetting the SQLite schema."""
    Base.metadata.drop_all(bind=bind if bind is not None else engine)
