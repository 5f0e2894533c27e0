"""Storage accounting, usage reporting and upload analytics for a company.

Storage usage is recalculated from uploaded_files and written back to the
company row; the validation cache picks it up on its next miss (or after
clear-cache).
"""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from apps.subscription_api.schemas.usage import (
    AnalyticsSubscription,
    AnalyticsUsage,
    DashboardUsage,
    FileTypeStat,
    PlanLimitsOut,
    ReportCompany,
    ReportFile,
    ReportSubscription,
    ReportUsage,
    StorageCheckOut,
    UsageAnalytics,
    UsagePercentagesOut,
    UsageReport,
)
from apps.subscription_api.services import repo
from apps.subscription_api.services.plans import UNLIMITED_USERS, get_plan
from apps.subscription_api.services.policy import REASON_STORAGE_EXCEEDED
from apps.subscription_api.services.subscription_store import CompanyNotFoundError, SubscriptionFacts

logger = logging.getLogger(__name__)

ANALYTICS_PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_ANALYTICS_PERIOD = "30d"


@dataclass(frozen=True)
class StorageRecalc:
    company_id: int
    total_bytes: int
    file_count: int


def _require_company(company_id: int):
    company = repo.get_company(company_id)
    if company is None:
        raise CompanyNotFoundError(company_id)
    return company


def _facts(company) -> SubscriptionFacts:
    return SubscriptionFacts.from_row(
        company.subscription_status,
        company.plan_level,
        company.storage_used_bytes,
        company.storage_limit_bytes,
    )


def check_storage_limit(company_id: int, file_size: int) -> StorageCheckOut:
    """Would an upload of file_size bytes fit? Allowed iff current + file_size <= limit."""
    facts = _facts(_require_company(company_id))
    current = facts.storage_used_bytes
    limit = facts.storage_limit_bytes
    new_usage = current + file_size
    if new_usage > limit:
        return StorageCheckOut(
            allowed=False,
            reason=REASON_STORAGE_EXCEEDED,
            current_usage=current,
            limit=limit,
            file_size=file_size,
            new_usage=new_usage,
            would_exceed_by=new_usage - limit,
        )
    return StorageCheckOut(
        allowed=True,
        current_usage=current,
        limit=limit,
        file_size=file_size,
        new_usage=new_usage,
        remaining_space=limit - new_usage,
    )


def recalculate_storage_usage(company_id: int) -> StorageRecalc:
    """Sum uploaded file sizes and persist as the company's storage_used_bytes."""
    total_bytes, file_count = repo.sum_company_file_sizes(company_id)
    if repo.update_company_storage(company_id, total_bytes) is None:
        raise CompanyNotFoundError(company_id)
    logger.debug("Calculated storage usage for company %s: %d bytes", company_id, total_bytes)
    return StorageRecalc(company_id=company_id, total_bytes=total_bytes, file_count=file_count)


def _percent(used: int, limit: int) -> float:
    if limit <= 0:
        return 0.0
    return round(used / limit * 100, 2)


def _average(total: int, count: int) -> int:
    return round(total / count) if count else 0


def dashboard_usage(company_id: int) -> DashboardUsage:
    """Usage widget payload. Storage is recalculated first; on failure the stored value is used."""
    try:
        recalculate_storage_usage(company_id)
    except SQLAlchemyError as e:
        logger.warning("Storage calculation failed for company %s, using cached value: %s", company_id, e)

    company = _require_company(company_id)
    facts = _facts(company)
    plan = get_plan(facts.plan_level)
    user_count = repo.count_active_users(company_id)
    return DashboardUsage(
        company_id=company.id,
        company_name=company.name,
        subscription_status=facts.subscription_status,
        plan_level=facts.plan_level,
        storage_used=facts.storage_used_bytes,
        storage_limit=facts.storage_limit_bytes,
        user_count=user_count,
        plan_limits=PlanLimitsOut(
            storage_limit=plan.storage_limit_bytes,
            max_users=plan.max_users,
            features=list(plan.feature_labels),
        ),
        next_billing_date=company.current_period_end,
        last_updated=datetime.now(timezone.utc),
        usage_percentages=UsagePercentagesOut(
            storage=_percent(facts.storage_used_bytes, facts.storage_limit_bytes),
            users=None if plan.max_users == UNLIMITED_USERS else _percent(user_count, plan.max_users),
        ),
        upgrade_url=plan.upgrade_url,
    )


def usage_report(company_id: int) -> UsageReport:
    """Company overview, subscription, usage totals and per-file listing."""
    company = _require_company(company_id)
    facts = _facts(company)
    files = repo.list_company_files(company_id)
    sizes = [f.size_bytes or 0 for f in files]
    return UsageReport(
        company=ReportCompany(id=company.id, name=company.name, created_at=company.created_at),
        subscription=ReportSubscription(
            status=facts.subscription_status,
            plan_level=facts.plan_level,
            current_period_start=company.current_period_start,
            current_period_end=company.current_period_end,
        ),
        usage=ReportUsage(
            storage_used=facts.storage_used_bytes,
            storage_limit=facts.storage_limit_bytes,
            user_count=repo.count_active_users(company_id),
            file_count=len(files),
            average_file_size=_average(sum(sizes), len(sizes)),
        ),
        files=[
            ReportFile(
                id=f.id,
                name=f.name,
                size=f.size_bytes or 0,
                mime_type=f.mime,
                uploaded_at=f.created_at,
                uploaded_by=f.uploaded_by or "Unknown",
            )
            for f in files
        ],
    )


def file_type_breakdown(files) -> list[FileTypeStat]:
    """Count and size per extension (missing ext is "unknown"), most frequent first."""
    counts: dict[str, int] = {}
    sizes: dict[str, int] = {}
    for f in files:
        ext = f.ext or "unknown"
        counts[ext] = counts.get(ext, 0) + 1
        sizes[ext] = sizes.get(ext, 0) + (f.size_bytes or 0)
    # sorted() is stable: equal counts keep first-seen order
    ordered = sorted(counts, key=lambda ext: counts[ext], reverse=True)
    return [
        FileTypeStat(
            extension=ext,
            count=counts[ext],
            total_size=sizes[ext],
            avg_size=_average(sizes[ext], counts[ext]),
        )
        for ext in ordered
    ]


def usage_analytics(
    company_id: int,
    period: str = DEFAULT_ANALYTICS_PERIOD,
    now: datetime | None = None,
) -> UsageAnalytics:
    """Uploads in the trailing 7d/30d/90d window plus a per-extension breakdown.

    Unknown periods use the 30d window and are reported as 30d.
    """
    if period not in ANALYTICS_PERIOD_DAYS:
        period = DEFAULT_ANALYTICS_PERIOD
    company = _require_company(company_id)
    facts = _facts(company)
    end = now or datetime.now(timezone.utc)
    start = end - timedelta(days=ANALYTICS_PERIOD_DAYS[period])
    files = repo.list_company_files_between(company_id, start, end)
    bytes_uploaded = sum(f.size_bytes or 0 for f in files)
    return UsageAnalytics(
        period=period,
        start_date=start,
        end_date=end,
        subscription=AnalyticsSubscription(
            status=facts.subscription_status,
            plan_level=facts.plan_level,
            storage_used=facts.storage_used_bytes,
            storage_limit=facts.storage_limit_bytes,
            user_count=repo.count_active_users(company_id),
        ),
        usage=AnalyticsUsage(
            files_uploaded=len(files),
            bytes_uploaded=bytes_uploaded,
            avg_file_size=_average(bytes_uploaded, len(files)),
        ),
        file_types=file_type_breakdown(files),
    )


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def render_usage_report_csv(report: UsageReport) -> str:
    """Two-part CSV: key/value company overview, blank line, then the files table."""
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(["Company Report"])
    w.writerow(["Company ID", report.company.id])
    w.writerow(["Company Name", report.company.name])
    w.writerow(["Created At", _iso(report.company.created_at)])
    w.writerow(["Subscription Status", report.subscription.status])
    w.writerow(["Plan Level", report.subscription.plan_level])
    w.writerow(["Storage Used (bytes)", report.usage.storage_used])
    w.writerow(["Storage Limit (bytes)", report.usage.storage_limit])
    w.writerow(["User Count", report.usage.user_count])
    w.writerow(["File Count", report.usage.file_count])
    w.writerow(["Average File Size (bytes)", report.usage.average_file_size])
    w.writerow([])
    w.writerow(["Files Detail"])
    w.writerow(["File ID", "File Name", "Size (bytes)", "MIME Type", "Uploaded At", "Uploaded By"])
    for f in report.files:
        w.writerow([f.id, f.name, f.size, f.mime_type or "", _iso(f.uploaded_at), f.uploaded_by])
    return buf.getvalue()
