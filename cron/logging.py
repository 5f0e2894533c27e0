"""Cron logging: every job logs to stdout and to <LOG_DIR>/cron_<job>.log."""

import logging
from pathlib import Path

from cron.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def get_logger(job_name: str) -> logging.Logger:
    """Logger named cron.<job_name>. Handlers are attached once per process."""
    logger = logging.getLogger(f"cron.{job_name}")
    logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    logger.addHandler(console)

    log_dir = Path(config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / f"cron_{job_name}.log", encoding="utf-8")
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)
    return logger
