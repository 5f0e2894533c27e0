"""SQLAlchemy models. Company-scoped tables carry company_id; queries MUST filter by it."""

from apps.subscription_api.models.app_user import AppUser
from apps.subscription_api.models.base import Base
from apps.subscription_api.models.bot import Bot
from apps.subscription_api.models.company import Company
from apps.subscription_api.models.uploaded_file import UploadedFile

__all__ = [
    "AppUser",
    "Base",
    "Bot",
    "Company",
    "UploadedFile",
]
