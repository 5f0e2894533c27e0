"""Repository layer. Company-scoped functions take company_id as first argument.

RULE: Repo is the ONLY place allowed to run DB reads/writes (session.execute, get_db).
All company-scoped queries MUST use company_filters (select_*_for_company / company_where).
"""

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import func, select

from apps.subscription_api.db import get_db
from apps.subscription_api.models.app_user import AppUser
from apps.subscription_api.models.bot import Bot
from apps.subscription_api.models.company import Company
from apps.subscription_api.models.uploaded_file import UploadedFile
from apps.subscription_api.repositories.company_filters import (
    company_where,
    select_bots_for_company,
    select_files_for_company,
    select_users_for_company,
)


def get_company(company_id: int) -> Company | None:
    """Return company row or None. Detached; attributes are loaded (expire_on_commit=False)."""
    with get_db() as session:
        return session.get(Company, company_id)


def list_company_ids() -> list[int]:
    """All company ids, ascending."""
    with get_db() as session:
        return list(session.execute(select(Company.id).order_by(Company.id)).scalars().all())


def list_bot_ids(company_id: int) -> list[int]:
    """Bot ids owned by company, ascending."""
    stmt = select_bots_for_company(company_id).with_only_columns(Bot.id).order_by(Bot.id)
    with get_db() as session:
        return list(session.execute(stmt).scalars().all())


def count_active_users(company_id: int) -> int:
    """Users assigned to company that are not blocked."""
    stmt = (
        select_users_for_company(company_id)
        .where(AppUser.blocked.is_(False))
        .with_only_columns(func.count(AppUser.id))
    )
    with get_db() as session:
        return int(session.execute(stmt).scalar_one())


def list_company_files(company_id: int) -> list[UploadedFile]:
    """Uploaded files for company, oldest first."""
    stmt = select_files_for_company(company_id).order_by(UploadedFile.created_at, UploadedFile.id)
    with get_db() as session:
        return list(session.execute(stmt).scalars().all())


def list_company_files_between(company_id: int, start: datetime, end: datetime) -> list[UploadedFile]:
    """Files uploaded in [start, end], oldest first."""
    stmt = (
        select_files_for_company(company_id)
        .where(UploadedFile.created_at >= start, UploadedFile.created_at <= end)
        .order_by(UploadedFile.created_at, UploadedFile.id)
    )
    with get_db() as session:
        return list(session.execute(stmt).scalars().all())


def sum_company_file_sizes(company_id: int) -> tuple[int, int]:
    """Return (total_bytes, file_count) over the company's uploaded files."""
    stmt = select(
        func.coalesce(func.sum(UploadedFile.size_bytes), 0),
        func.count(UploadedFile.id),
    ).where(company_where(UploadedFile, company_id))
    with get_db() as session:
        total, count = session.execute(stmt).one()
        return int(total), int(count)


def update_company_storage(company_id: int, storage_used_bytes: int) -> Company | None:
    """Write storage_used_bytes and storage_updated_at. Returns updated company or None if missing."""
    with get_db() as session:
        company = session.get(Company, company_id)
        if company is None:
            return None
        company.storage_used_bytes = storage_used_bytes
        company.storage_updated_at = datetime.now(timezone.utc)
        session.flush()
        return company


def create_company(
    name: str,
    subscription_status: str | None = None,
    plan_level: str | None = None,
    storage_used_bytes: int | None = None,
    storage_limit_bytes: int | None = None,
    current_period_end: datetime | None = None,
) -> Company:
    """Insert a company. Used by seeding scripts and tests."""
    with get_db() as session:
        company = Company(
            name=name,
            subscription_status=subscription_status,
            plan_level=plan_level,
            storage_used_bytes=storage_used_bytes,
            storage_limit_bytes=storage_limit_bytes,
            current_period_end=current_period_end,
        )
        session.add(company)
        session.flush()
        session.refresh(company)
        return company


def set_subscription_status(company_id: int, subscription_status: str) -> None:
    """Update subscription_status (billing webhooks own this upstream)."""
    with get_db() as session:
        company = session.get(Company, company_id)
        if company is not None:
            company.subscription_status = subscription_status


def create_bot(company_id: int, name: str) -> Bot:
    with get_db() as session:
        bot = Bot(company_id=company_id, name=name)
        session.add(bot)
        session.flush()
        session.refresh(bot)
        return bot


def create_user(company_id: int | None, email: str, bot_id: int | None = None, blocked: bool = False) -> AppUser:
    with get_db() as session:
        user = AppUser(company_id=company_id, bot_id=bot_id, email=email, blocked=blocked)
        session.add(user)
        session.flush()
        session.refresh(user)
        return user


def insert_files(company_id: int, records: Sequence[dict]) -> None:
    """Bulk insert uploaded_files.

    Each dict: name, size_bytes, optional mime, ext, bot_id, uploaded_by, created_at
    (server default when absent).
    """
    if not records:
        return
    rows = []
    for r in records:
        row = UploadedFile(
            company_id=company_id,
            bot_id=r.get("bot_id"),
            name=r["name"],
            size_bytes=r.get("size_bytes"),
            mime=r.get("mime"),
            ext=r.get("ext"),
            uploaded_by=r.get("uploaded_by"),
        )
        if r.get("created_at") is not None:
            row.created_at = r["created_at"]
        rows.append(row)
    with get_db() as session:
        session.add_all(rows)
