"""Subscription store adapter: authoritative subscription/usage facts per company.

The validation cache reads through this interface and never writes to it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError

from apps.subscription_api.services import repo
from apps.subscription_api.services.plans import (
    DEFAULT_STORAGE_LIMIT_BYTES,
    PLAN_STARTER,
    STATUS_TRIAL,
    derive_features,
)

logger = logging.getLogger(__name__)

MIN_COMPANY_ID = -(2**63)
MAX_COMPANY_ID = 2**63 - 1


class CompanyNotFoundError(LookupError):
    """Company does not exist in the backing store. Never cached."""

    def __init__(self, company_id: Any) -> None:
        super().__init__(f"Company not found: {company_id!r}")
        self.company_id = company_id


class StoreUnavailableError(RuntimeError):
    """Backing store unreachable or query failed."""

    pass


@dataclass(frozen=True)
class SubscriptionFacts:
    """Snapshot of a company's subscription and storage state."""

    subscription_status: str = STATUS_TRIAL
    plan_level: str = PLAN_STARTER
    storage_used_bytes: int = 0
    storage_limit_bytes: int = DEFAULT_STORAGE_LIMIT_BYTES
    features: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_row(
        cls,
        subscription_status: str | None,
        plan_level: str | None,
        storage_used_bytes: int | None,
        storage_limit_bytes: int | None,
    ) -> "SubscriptionFacts":
        """Apply upstream defaults: trial, starter, 0 bytes used, 2 GiB limit when unset or zero."""
        plan = plan_level or PLAN_STARTER
        return cls(
            subscription_status=subscription_status or STATUS_TRIAL,
            plan_level=plan,
            storage_used_bytes=int(storage_used_bytes or 0),
            storage_limit_bytes=int(storage_limit_bytes or DEFAULT_STORAGE_LIMIT_BYTES),
            features=derive_features(plan),
        )


class SubscriptionStore(Protocol):
    def fetch_facts(self, company_id: Any) -> SubscriptionFacts:
        """Return facts for company_id. Raises CompanyNotFoundError or StoreUnavailableError."""
        ...

    def count_active_users(self, company_id: Any) -> int:
        ...


def parse_company_id(company_id: Any) -> int | None:
    """Coerce a wire company id to int.

    Returns None (treated as not found) for non-numeric ids and ids outside the signed
    64-bit range, which no row can have.
    """
    if isinstance(company_id, bool):
        return None
    if isinstance(company_id, int):
        cid = company_id
    else:
        try:
            cid = int(str(company_id).strip())
        except (TypeError, ValueError):
            return None
    if not MIN_COMPANY_ID <= cid <= MAX_COMPANY_ID:
        return None
    return cid


class SqlSubscriptionStore:
    """SubscriptionStore backed by the companies table (via repo)."""

    def fetch_facts(self, company_id: Any) -> SubscriptionFacts:
        cid = parse_company_id(company_id)
        if cid is None:
            raise CompanyNotFoundError(company_id)
        try:
            company = repo.get_company(cid)
        except SQLAlchemyError as e:
            logger.warning("Subscription store lookup failed company_id=%s: %s", cid, e)
            raise StoreUnavailableError("Subscription store unavailable") from e
        if company is None:
            raise CompanyNotFoundError(company_id)
        return SubscriptionFacts.from_row(
            company.subscription_status,
            company.plan_level,
            company.storage_used_bytes,
            company.storage_limit_bytes,
        )

    def count_active_users(self, company_id: Any) -> int:
        cid = parse_company_id(company_id)
        if cid is None:
            return 0
        try:
            return repo.count_active_users(cid)
        except SQLAlchemyError as e:
            logger.warning("Active user count failed company_id=%s: %s", cid, e)
            raise StoreUnavailableError("Subscription store unavailable") from e
