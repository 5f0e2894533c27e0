"""Plan catalog: storage limits, seat limits, feature labels and upgrade paths per plan level."""

from dataclasses import dataclass

GIB = 1024 * 1024 * 1024

PLAN_STARTER = "starter"
PLAN_PROFESSIONAL = "professional"
PLAN_ENTERPRISE = "enterprise"
PLAN_LEVELS = (PLAN_STARTER, PLAN_PROFESSIONAL, PLAN_ENTERPRISE)

STATUS_TRIAL = "trial"
STATUS_ACTIVE = "active"
STATUS_PAST_DUE = "past_due"
STATUS_CANCELED = "canceled"
STATUS_UNPAID = "unpaid"
SUBSCRIPTION_STATUSES = (STATUS_TRIAL, STATUS_ACTIVE, STATUS_PAST_DUE, STATUS_CANCELED, STATUS_UNPAID)

DEFAULT_STORAGE_LIMIT_BYTES = 2 * GIB
UNLIMITED_USERS = -1


@dataclass(frozen=True)
class PlanSpec:
    level: str
    storage_limit_bytes: int
    max_users: int
    feature_labels: tuple[str, ...]
    upgrade_url: str | None


PLAN_CATALOG: dict[str, PlanSpec] = {
    PLAN_STARTER: PlanSpec(
        level=PLAN_STARTER,
        storage_limit_bytes=DEFAULT_STORAGE_LIMIT_BYTES,
        max_users=5,
        feature_labels=("Basic Support", "File Upload", "AI Chat"),
        upgrade_url="/billing/checkout?plan=professional",
    ),
    PLAN_PROFESSIONAL: PlanSpec(
        level=PLAN_PROFESSIONAL,
        storage_limit_bytes=20 * GIB,
        max_users=25,
        feature_labels=("Priority Support", "Advanced Analytics", "Custom Domains", "File Upload", "AI Chat"),
        upgrade_url="/billing/checkout?plan=enterprise",
    ),
    PLAN_ENTERPRISE: PlanSpec(
        level=PLAN_ENTERPRISE,
        storage_limit_bytes=100 * GIB,
        max_users=UNLIMITED_USERS,
        feature_labels=(
            "24/7 Support",
            "Advanced Analytics",
            "Custom Domains",
            "API Access",
            "File Upload",
            "AI Chat",
        ),
        upgrade_url=None,
    ),
}


def get_plan(plan_level: str | None) -> PlanSpec:
    """Return the plan spec for plan_level. Unknown or missing levels fall back to starter."""
    return PLAN_CATALOG.get(plan_level or PLAN_STARTER, PLAN_CATALOG[PLAN_STARTER])


def derive_features(plan_level: str | None) -> dict[str, bool]:
    """Capability flags reported with every validation. Only customDomains depends on the plan."""
    return {
        "aiChat": True,
        "fileUpload": True,
        "userManagement": True,
        "customDomains": (plan_level or PLAN_STARTER) != PLAN_STARTER,
    }
