"""Server-side request context: the caller's company and the process validation cache.

Company is taken from auth (request.state, set by auth_middleware). Client-provided
company ids in query/body are only compared against it, never trusted.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from apps.subscription_api.services.subscription_store import parse_company_id
from apps.subscription_api.services.validation_cache import ValidationCache


def get_company_id(request: Request) -> int:
    """FastAPI dependency: integer company_id from request.state. 401 if missing or not numeric."""
    company_id = parse_company_id(getattr(request.state, "company_id", None))
    if company_id is None:
        raise HTTPException(status_code=401, detail="Company ID required")
    return company_id


def get_validation_cache(request: Request) -> ValidationCache:
    """FastAPI dependency: the ValidationCache owned by the app (created at startup)."""
    return request.app.state.validation_cache


# Type aliases for Depends()
CompanyId = Annotated[int, Depends(get_company_id)]
ValidationCacheDep = Annotated[ValidationCache, Depends(get_validation_cache)]
