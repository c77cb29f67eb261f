"""
Health check endpoint.

GET /health — checks MongoDB connectivity and whether SMTP is configured.
Rules:
- MongoDB failure → "unhealthy" (503); the app cannot function without it.
- SMTP not configured → "degraded" (200); codes are issued but not delivered.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from config import AppSettings
from dependencies import get_settings
from schemas.dto.responses.common import HealthChecks, HealthResponse
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "MongoDB unreachable"}},
)
async def health_check(
    request: Request, settings: AppSettings = Depends(get_settings)
) -> JSONResponse:
    try:
        await request.app.state.db.client.admin.command("ping")
        mongodb = "ok"
    except Exception as e:
        log.error("health_mongodb_ping_failed", error=str(e), error_type=type(e).__name__)
        mongodb = "error"

    smtp = "configured" if settings.smtp.is_configured else "not_configured"

    if mongodb == "error":
        status = "unhealthy"
    elif smtp == "not_configured":
        status = "degraded"
    else:
        status = "healthy"

    body = HealthResponse(status=status, checks=HealthChecks(mongodb=mongodb, smtp=smtp))
    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        content=body.model_dump(),
    )
