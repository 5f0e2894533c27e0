"""Auth middleware: inject company_id from the Authorization header only.

Company comes from "Bearer company:<id>" or an HS256 JWT carrying a company_id claim
(verified with JWT_SECRET; JWTs are rejected when no secret is configured).
Only the dashboard/report/analytics/storage endpoints require it; validation endpoints are
called by the ingestion service and stay public.
"""

import logging
import re
from typing import Literal

import jwt
from starlette.requests import Request
from starlette.responses import JSONResponse

from apps.subscription_api.config import config

logger = logging.getLogger(__name__)

# "Bearer company:12" or "Bearer company=12"
BEARER_COMPANY_PATTERN = re.compile(r"^Bearer\s+company[:=](.+)$", re.IGNORECASE)

PROTECTED_PATHS = frozenset(
    {
        "/subscription/dashboard-usage",
        "/subscription/usage-report",
        "/subscription/analytics",
        "/subscription/storage-check",
    }
)


def _parse_company_from_jwt(token: str) -> tuple[str | None, str | None]:
    """Verify JWT and read company_id (and sub as actor_id). Returns (None, None) on any failure."""
    if not config.JWT_SECRET:
        return None, None
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("Rejected JWT: %s", e)
        return None, None
    cid = payload.get("company_id")
    aid = payload.get("sub")
    if cid is None or not str(cid).strip():
        return None, None
    return str(cid).strip(), str(aid).strip() if aid else None


def _extract_company_and_actor(auth_header: str) -> tuple[str | Literal[False], str | None]:
    """Parse company_id and optional actor_id from a Bearer header."""
    header = auth_header.strip()
    if not header.lower().startswith("bearer "):
        return False, None
    m = BEARER_COMPANY_PATTERN.match(header)
    if m:
        return m.group(1).strip() or False, None
    cid, aid = _parse_company_from_jwt(header[7:].strip())
    return (cid if cid else False, aid)


def _is_protected(path: str) -> bool:
    return path.rstrip("/") in PROTECTED_PATHS


async def auth_middleware(request: Request, call_next):
    """Set request.state.company_id when the header carries one; 401 only on protected paths."""
    company_id: str | Literal[False] = False
    actor_id: str | None = None

    auth_header = request.headers.get("Authorization")
    if auth_header:
        company_id, actor_id = _extract_company_and_actor(auth_header)

    if company_id:
        request.state.company_id = company_id
        if actor_id:
            request.state.actor_id = actor_id
    elif _is_protected(request.url.path):
        return JSONResponse(
            status_code=401,
            content={"detail": "Missing or invalid company. Use Authorization: Bearer company:<id> or JWT with company_id claim"},
        )
    return await call_next(request)
