"""
Response shapes shared by every router.

ErrorResponse is the body of every non-2xx reply; ``error_responses`` turns a
list of status codes into the ``responses=`` mapping routes declare so the
OpenAPI schema documents those bodies.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict

_STATUS_DESCRIPTIONS = {
    400: "Invalid request body or parameters",
    401: "Missing, invalid or expired credentials",
    409: "Resource already exists",
    503: "A required downstream service is unavailable",
}


class ErrorResponse(BaseModel):
    """{error, code, field?, details?} as built by AppError.to_dict()."""

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthChecks(BaseModel):
    mongodb: Literal["ok", "error"]
    smtp: Literal["configured", "not_configured"]


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["healthy", "degraded", "unhealthy"]
    checks: HealthChecks


class MessageResponse(BaseModel):
    """Generic success/message response returned by several endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: Optional[str] = None


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    return {
        code: {"model": ErrorResponse, "description": _STATUS_DESCRIPTIONS[code]}
        for code in status_codes
    }
