"""Company-scoped SQL helpers. All company-scoped queries MUST use these.

Provides:
  - company_where(model, company_id): binary expression for WHERE model.company_id == company_id
  - select_*_for_company(company_id): SQLAlchemy Select with company filter applied
"""

from sqlalchemy import BinaryExpression, Select, select

from apps.subscription_api.models.app_user import AppUser
from apps.subscription_api.models.bot import Bot
from apps.subscription_api.models.uploaded_file import UploadedFile


def company_where(model: type, company_id: int) -> BinaryExpression[bool]:
    """Return WHERE clause: model.company_id == company_id."""
    col = getattr(model, "company_id", None)
    if col is None:
        raise ValueError(f"Model {model.__name__} has no company_id column")
    return col == company_id


def select_bots_for_company(company_id: int) -> Select[tuple[Bot]]:
    """Select from bots with company filter. Add .where() for further filters."""
    return select(Bot).where(company_where(Bot, company_id))


def select_users_for_company(company_id: int) -> Select[tuple[AppUser]]:
    """Select from app_users with company filter."""
    return select(AppUser).where(company_where(AppUser, company_id))


def select_files_for_company(company_id: int) -> Select[tuple[UploadedFile]]:
    """Select from uploaded_files with company filter."""
    return select(UploadedFile).where(company_where(UploadedFile, company_id))
