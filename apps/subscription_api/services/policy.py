"""Subscription validation policy. Pure: facts in, verdict out."""

from dataclasses import dataclass

from apps.subscription_api.services.plans import STATUS_CANCELED, STATUS_PAST_DUE
from apps.subscription_api.services.subscription_store import SubscriptionFacts

REASON_STORAGE_EXCEEDED = "Storage limit exceeded"
REASON_SUBSCRIPTION_INACTIVE = "Subscription inactive"

# unpaid is deliberately absent: it gets a grace period.
INACTIVE_STATUSES = frozenset({STATUS_CANCELED, STATUS_PAST_DUE})


@dataclass(frozen=True)
class PolicyDecision:
    is_valid: bool
    reason: str | None = None


def evaluate(facts: SubscriptionFacts) -> PolicyDecision:
    """Apply rules in fixed order; the first failure wins.

    1. storage used >= limit  -> "Storage limit exceeded"
    2. status canceled/past_due -> "Subscription inactive"
    3. otherwise valid
    """
    if facts.storage_used_bytes >= facts.storage_limit_bytes:
        return PolicyDecision(is_valid=False, reason=REASON_STORAGE_EXCEEDED)
    if facts.subscription_status in INACTIVE_STATUSES:
        return PolicyDecision(is_valid=False, reason=REASON_SUBSCRIPTION_INACTIVE)
    return PolicyDecision(is_valid=True)
