"""Usage dashboard, usage report, analytics and storage check schemas. Company from auth only."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PlanLimitsOut(_CamelModel):
    storage_limit: int = Field(..., alias="storageLimit")
    max_users: int = Field(..., alias="maxUsers", description="-1 means unlimited")
    features: list[str]


class UsagePercentagesOut(_CamelModel):
    storage: float
    users: float | None = Field(None, description="None when the plan has unlimited seats")


class DashboardUsage(_CamelModel):
    company_id: int = Field(..., alias="companyId")
    company_name: str = Field(..., alias="companyName")
    subscription_status: str = Field(..., alias="subscriptionStatus")
    plan_level: str = Field(..., alias="planLevel")
    storage_used: int = Field(..., alias="storageUsed")
    storage_limit: int = Field(..., alias="storageLimit")
    user_count: int = Field(..., alias="userCount")
    plan_limits: PlanLimitsOut = Field(..., alias="planLimits")
    next_billing_date: datetime | None = Field(None, alias="nextBillingDate")
    last_updated: datetime = Field(..., alias="lastUpdated")
    usage_percentages: UsagePercentagesOut = Field(..., alias="usagePercentages")
    upgrade_url: str | None = Field(None, alias="upgradeUrl")


class DashboardUsageOut(BaseModel):
    data: DashboardUsage


class StorageCheckOut(_CamelModel):
    """Whether an upload of file_size bytes fits. reason/wouldExceedBy only when refused."""

    allowed: bool
    reason: str | None = None
    current_usage: int = Field(..., alias="currentUsage")
    limit: int
    file_size: int = Field(..., alias="fileSize")
    new_usage: int = Field(..., alias="newUsage")
    remaining_space: int | None = Field(None, alias="remainingSpace")
    would_exceed_by: int | None = Field(None, alias="wouldExceedBy")


class ReportCompany(_CamelModel):
    id: int
    name: str
    created_at: datetime | None = Field(None, alias="createdAt")


class ReportSubscription(_CamelModel):
    status: str
    plan_level: str = Field(..., alias="planLevel")
    current_period_start: datetime | None = Field(None, alias="currentPeriodStart")
    current_period_end: datetime | None = Field(None, alias="currentPeriodEnd")


class ReportUsage(_CamelModel):
    storage_used: int = Field(..., alias="storageUsed")
    storage_limit: int = Field(..., alias="storageLimit")
    user_count: int = Field(..., alias="userCount")
    file_count: int = Field(..., alias="fileCount")
    average_file_size: int = Field(..., alias="averageFileSize")


class ReportFile(_CamelModel):
    id: int
    name: str
    size: int
    mime_type: str | None = Field(None, alias="mimeType")
    uploaded_at: datetime | None = Field(None, alias="uploadedAt")
    uploaded_by: str = Field("Unknown", alias="uploadedBy")


class UsageReport(_CamelModel):
    company: ReportCompany
    subscription: ReportSubscription
    usage: ReportUsage
    files: list[ReportFile] = Field(default_factory=list)


class UsageReportOut(BaseModel):
    data: UsageReport


class AnalyticsSubscription(_CamelModel):
    status: str
    plan_level: str = Field(..., alias="planLevel")
    storage_used: int = Field(..., alias="storageUsed")
    storage_limit: int = Field(..., alias="storageLimit")
    user_count: int = Field(..., alias="userCount")


class AnalyticsUsage(_CamelModel):
    files_uploaded: int = Field(..., alias="filesUploaded")
    bytes_uploaded: int = Field(..., alias="bytesUploaded")
    avg_file_size: int = Field(..., alias="avgFileSize")


class FileTypeStat(_CamelModel):
    extension: str
    count: int
    total_size: int = Field(..., alias="totalSize")
    avg_size: int = Field(..., alias="avgSize")


class UsageAnalytics(_CamelModel):
    """Upload activity over a trailing window. fileTypes is ordered by count, most frequent first."""

    period: str
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")
    subscription: AnalyticsSubscription
    usage: AnalyticsUsage
    file_types: list[FileTypeStat] = Field(default_factory=list, alias="fileTypes")


class UsageAnalyticsOut(BaseModel):
    data: UsageAnalytics
