"""Usage endpoints: /subscription/dashboard-usage, usage-report, analytics, storage-check.

Company injected server-side from auth; a companyId query param is only checked against it.
"""

import logging
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, Response
from sqlalchemy.exc import SQLAlchemyError

from apps.subscription_api.schemas.requests import StorageCheckRequest
from apps.subscription_api.schemas.usage import (
    DashboardUsageOut,
    StorageCheckOut,
    UsageAnalyticsOut,
    UsageReportOut,
)
from apps.subscription_api.services.company_context import CompanyId
from apps.subscription_api.services.subscription_store import CompanyNotFoundError, parse_company_id
from apps.subscription_api.services.usage import (
    check_storage_limit,
    dashboard_usage as dashboard_usage_service,
    render_usage_report_csv,
    usage_analytics,
    usage_report as usage_report_service,
)
from apps.subscription_api.services.validation_cache import ERROR_COMPANY_NOT_FOUND

logger = logging.getLogger(__name__)

router = APIRouter()

DASHBOARD_CACHE_CONTROL = "public, max-age=60"


@router.get("/dashboard-usage", response_model=DashboardUsageOut)
def dashboard_usage(company_id: CompanyId, response: Response) -> DashboardUsageOut:
    """Usage widget data for the caller's company. Storage is recalculated before reading."""
    try:
        data = dashboard_usage_service(company_id)
    except CompanyNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_COMPANY_NOT_FOUND)
    except SQLAlchemyError:
        logger.exception("Dashboard usage failed company_id=%s", company_id)
        raise HTTPException(status_code=500, detail="Failed to get dashboard data")
    response.headers["Cache-Control"] = DASHBOARD_CACHE_CONTROL
    return DashboardUsageOut(data=data)


@router.get("/usage-report", response_model=UsageReportOut)
def usage_report(
    company_id: CompanyId,
    requested_company_id: str | None = Query(None, alias="companyId"),
    report_format: Literal["csv", "json"] = Query("csv", alias="format"),
):
    """Usage report as CSV attachment (default) or JSON. 403 if companyId is not the caller's."""
    if requested_company_id is not None and parse_company_id(requested_company_id) != company_id:
        raise HTTPException(status_code=403, detail="Access denied")
    try:
        report = usage_report_service(company_id)
    except CompanyNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_COMPANY_NOT_FOUND)
    except SQLAlchemyError:
        logger.exception("Usage report failed company_id=%s", company_id)
        raise HTTPException(status_code=500, detail="Failed to generate usage report")

    if report_format == "json":
        return UsageReportOut(data=report)
    filename = f"usage-report-{company_id}-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=render_usage_report_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/analytics", response_model=UsageAnalyticsOut)
def analytics(
    company_id: CompanyId,
    period: str = Query("30d", description="7d, 30d or 90d; anything else uses 30d"),
) -> UsageAnalyticsOut:
    """Upload activity for the caller's company over the last 7, 30 or 90 days."""
    try:
        data = usage_analytics(company_id, period)
    except CompanyNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_COMPANY_NOT_FOUND)
    except SQLAlchemyError:
        logger.exception("Usage analytics failed company_id=%s", company_id)
        raise HTTPException(status_code=500, detail="Failed to get analytics")
    return UsageAnalyticsOut(data=data)


@router.post("/storage-check", response_model=StorageCheckOut, response_model_exclude_none=True)
def storage_check(body: StorageCheckRequest, company_id: CompanyId) -> StorageCheckOut:
    """Would an upload of fileSize bytes fit within the caller's storage limit?"""
    try:
        return check_storage_limit(company_id, body.file_size)
    except CompanyNotFoundError:
        raise HTTPException(status_code=404, detail=ERROR_COMPANY_NOT_FOUND)
