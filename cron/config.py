"""Cron config from environment."""

import os


def _float(val: str | None, default: float) -> float:
    if val is None or val.strip() == "":
        return default
    try:
        return float(val.strip())
    except ValueError:
        return default


def _list(val: str | None) -> list[str]:
    if val is None or val.strip() == "":
        return []
    return [s.strip() for s in val.split(",") if s.strip()]


class Config:
    """Cron configuration from env vars. COMPANIES empty means every company in the database."""

    API_BASE: str = os.getenv("API_BASE", "http://localhost:8000")
    COMPANIES: list[int] = [int(c) for c in _list(os.getenv("COMPANIES")) if c.isdigit()]
    REQUEST_TIMEOUT_SECONDS: float = _float(os.getenv("REQUEST_TIMEOUT_SECONDS"), 10.0)
    LOG_DIR: str = os.getenv("CRON_LOG_DIR", "logs")
    LOG_LEVEL: str = (os.getenv("CRON_LOG_LEVEL") or "INFO").strip().upper()


config = Config()
