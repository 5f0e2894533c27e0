"""Tenant identity for subscription validation: a (company, bot) pair."""

from dataclasses import dataclass
from typing import Any

IDS_REQUIRED_MESSAGE = "Company ID and Bot ID are required"
IDS_INVALID_MESSAGE = "Company ID and Bot ID must be integers or strings"


class TenantKeyRequiredError(ValueError):
    """Raised when company_id or bot_id is missing or malformed."""

    def __init__(self, message: str = IDS_REQUIRED_MESSAGE) -> None:
        super().__init__(message)


@dataclass(frozen=True)
class TenantKey:
    """(company_id, bot_id). Ids are passed through as given; numeric checks happen at the store."""

    company_id: Any
    bot_id: Any

    @property
    def cache_key(self) -> str:
        """String identity used by the validation cache and cache-stats: '<company>-<bot>'."""
        return f"{self.company_id}-{self.bot_id}"

    def __str__(self) -> str:
        return self.cache_key


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _malformed(value: Any) -> bool:
    # bool is an int subclass but never an id
    return isinstance(value, bool) or not isinstance(value, (int, str))


def require_tenant_key(company_id: Any, bot_id: Any) -> TenantKey:
    """Build a TenantKey. Raises TenantKeyRequiredError if either id is None, blank or not an int/str."""
    if _missing(company_id) or _missing(bot_id):
        raise TenantKeyRequiredError()
    if _malformed(company_id) or _malformed(bot_id):
        raise TenantKeyRequiredError(IDS_INVALID_MESSAGE)
    return TenantKey(company_id=company_id, bot_id=bot_id)
