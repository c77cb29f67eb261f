"""
Sample protected endpoint.

GET /protected/dashboard — greets the token user (Bearer)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import get_current_claims
from schemas.dto.responses.auth import TokenUserResponse
from schemas.dto.responses.common import error_responses
from schemas.dto.responses.product import DashboardResponse
from shared.datetime_utils import utcnow

router = APIRouter(prefix="/protected", tags=["protected"])


@router.get(
    "/dashboard", response_model=DashboardResponse, responses=error_responses(401)
)
async def dashboard(
    claims: dict[str, Any] = Depends(get_current_claims),
) -> DashboardResponse:
    user = TokenUserResponse.from_claims(claims)
    return DashboardResponse(
        success=True,
        message=f"Welcome to the dashboard, {user.first_name or user.email}!",
        user=user,
        timestamp=utcnow(),
    )
