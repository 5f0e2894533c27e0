#!/usr/bin/env python3
"""Storage recalculation: refresh storage_used_bytes per company, then drop its cached validations.

For each company C (COMPANIES env, or every company when unset):
  - Sum uploaded_files sizes and write storage_used_bytes (services.usage.recalculate_storage_usage).
  - POST /subscription/clear-cache {companyId: C, botId: B} for every bot B of C, so the
    next validate-daily sees the new usage instead of waiting out the TTL.

Exit code 0 when every company succeeded, 1 otherwise.
"""

import sys
from pathlib import Path

import requests
from sqlalchemy.exc import SQLAlchemyError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cron.config import config
from cron.logging import get_logger

logger = get_logger("storage_recalc")


def _clear_cached_validation(
    session: requests.Session,
    base_url: str,
    company_id: int,
    bot_id: int,
    timeout: float,
) -> bool:
    """POST /subscription/clear-cache for one (company, bot). Returns False on any failure."""
    url = f"{base_url.rstrip('/')}/subscription/clear-cache"
    try:
        resp = session.post(url, json={"companyId": company_id, "botId": bot_id}, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("clear-cache error company=%s bot=%s: %s", company_id, bot_id, e)
        return False
    if resp.status_code != 200:
        logger.warning("clear-cache HTTP %s company=%s bot=%s", resp.status_code, company_id, bot_id)
        return False
    return True


def _run_company(session: requests.Session, company_id: int) -> bool:
    """Recalculate one company and clear its bots' cache entries. Returns True on success."""
    from apps.subscription_api.services import repo
    from apps.subscription_api.services.subscription_store import CompanyNotFoundError
    from apps.subscription_api.services.usage import recalculate_storage_usage

    try:
        recalc = recalculate_storage_usage(company_id)
        bot_ids = repo.list_bot_ids(company_id)
    except CompanyNotFoundError:
        logger.error("company=%s not found", company_id)
        return False
    except SQLAlchemyError as e:
        logger.error("company=%s storage recalculation failed: %s", company_id, e)
        return False

    logger.info("company=%s storage_used_bytes=%s files=%s bots=%s", company_id, recalc.total_bytes, recalc.file_count, len(bot_ids))
    ok = True
    for bot_id in bot_ids:
        if not _clear_cached_validation(session, config.API_BASE, company_id, bot_id, config.REQUEST_TIMEOUT_SECONDS):
            ok = False
    return ok


def _company_ids() -> list[int]:
    if config.COMPANIES:
        return list(config.COMPANIES)
    from apps.subscription_api.services.repo import list_company_ids

    return list_company_ids()


def main() -> int:
    try:
        company_ids = _company_ids()
    except SQLAlchemyError as e:
        logger.error("cannot list companies: %s", e)
        return 1
    if not company_ids:
        logger.warning("no companies, nothing to run")
        return 0

    logger.info("storage_recalc start companies=%s", company_ids)
    failed: list[int] = []
    with requests.Session() as session:
        for company_id in company_ids:
            if not _run_company(session, company_id):
                failed.append(company_id)

    if failed:
        logger.error("storage_recalc done failed=%s", failed)
        return 1
    logger.info("storage_recalc done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
