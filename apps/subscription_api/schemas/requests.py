"""Request schemas for subscription endpoints. Wire format is camelCase."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValidateDailyRequest(BaseModel):
    """Request body for POST /subscription/validate-daily.

    Ids are untyped at the schema level so missing or malformed ids surface as 400 (not 422).
    """

    model_config = ConfigDict(populate_by_name=True)

    company_id: Any = Field(None, alias="companyId")
    bot_id: Any = Field(None, alias="botId")


class ValidateBatchRequest(BaseModel):
    """Request body for POST /subscription/validate-batch. validations is checked in the route."""

    model_config = ConfigDict(populate_by_name=True)

    validations: Any = None


class ClearCacheRequest(BaseModel):
    """Optional body for POST /subscription/clear-cache. Both ids => single entry, else everything."""

    model_config = ConfigDict(populate_by_name=True)

    company_id: Any = Field(None, alias="companyId")
    bot_id: Any = Field(None, alias="botId")


class StorageCheckRequest(BaseModel):
    """Request body for POST /subscription/storage-check. Company comes from auth only."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    file_size: int = Field(..., alias="fileSize", ge=0, description="Size of the pending upload in bytes")
