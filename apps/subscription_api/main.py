"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

logging.basicConfig(level=logging.INFO)
from fastapi.middleware.cors import CORSMiddleware

from apps.subscription_api.config import config
from apps.subscription_api.db import ensure_tables
from apps.subscription_api.routes import health, subscription, usage
from apps.subscription_api.services.auth import auth_middleware
from apps.subscription_api.services.subscription_store import SqlSubscriptionStore
from apps.subscription_api.services.validation_cache import ValidationCache

logger = logging.getLogger(__name__)


def build_validation_cache() -> ValidationCache:
    """One cache per process, reading through to the companies table."""
    return ValidationCache(
        SqlSubscriptionStore(),
        ttl_seconds=config.SUBSCRIPTION_CACHE_TTL_SECONDS,
        max_workers=config.BATCH_MAX_WORKERS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure tables exist on startup (SQLite/dev; Alembic owns Postgres)."""
    ensure_tables()
    logger.info("Subscription validation cache ttl=%ss", app.state.validation_cache.ttl_seconds)
    yield


app = FastAPI(
    title="Subscription Validation API",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.validation_cache = build_validation_cache()

app.add_middleware(CORSMiddleware, allow_origins=config.CORS_ALLOW_ORIGINS, allow_methods=["*"], allow_headers=["*"])
app.middleware("http")(auth_middleware)

app.include_router(health.router, tags=["health"])
app.include_router(subscription.router, prefix="/subscription", tags=["subscription"])
app.include_router(usage.router, prefix="/subscription", tags=["usage"])
