"""
Authentication endpoints.

POST /auth/register                — create an account (201)
POST /auth/login                   — step 1: password check, emails a code
POST /auth/verify-mfa              — step 2: code for access/refresh tokens
POST /auth/refresh                 — new access token from a refresh token
GET  /auth/profile                 — current user (Bearer)
POST /auth/validate-token          — decoded token user (Bearer)
POST /auth/request-password-reset  — emails a reset code if the account exists
POST /auth/reset-password          — code + new password
GET  /auth/code-stats              — verification codes per type (Bearer)
POST /auth/test-email              — SMTP connectivity check (Bearer)
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from dependencies import get_auth_service, get_bearer_token, get_current_claims
from schemas.dto.requests.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    RequestPasswordResetRequest,
    ResetPasswordRequest,
    SendTestEmailRequest,
    VerifyMfaRequest,
)
from schemas.dto.responses.auth import (
    CodeStatsResponse,
    LoginResponse,
    ProfileResponse,
    RefreshResponse,
    RegisterResponse,
    TokenPairResponse,
    TokenUserResponse,
    UserResponse,
    ValidateTokenResponse,
    VerifyMfaResponse,
)
from schemas.dto.responses.common import MessageResponse, error_responses
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

PASSWORD_RESET_REQUESTED = (
    "If an account exists for this email, a password reset code has been sent."
)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=201,
    responses=error_responses(400, 409),
)
async def register(
    body: RegisterRequest, auth: AuthService = Depends(get_auth_service)
) -> RegisterResponse:
    user = await auth.register(body.email, body.password, body.first_name, body.last_name)
    return RegisterResponse(
        success=True,
        message="User registered successfully",
        user=UserResponse.from_doc(user),
    )


@router.post(
    "/login", response_model=LoginResponse, responses=error_responses(400, 401, 503)
)
async def login(
    body: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    challenge = await auth.login(body.email, body.password)
    message = (
        "Verification code sent to your email"
        if challenge.email_sent
        else "Verification code generated but the email could not be sent"
    )
    return LoginResponse(
        success=True,
        message=message,
        temp_token=challenge.temp_token,
        expires_at=challenge.expires_at,
        email_sent=challenge.email_sent,
    )


@router.post(
    "/verify-mfa", response_model=VerifyMfaResponse, responses=error_responses(400, 401)
)
async def verify_mfa(
    body: VerifyMfaRequest, auth: AuthService = Depends(get_auth_service)
) -> VerifyMfaResponse:
    session = await auth.verify_mfa(body.email, body.code)
    return VerifyMfaResponse(
        success=True,
        message="Login successful",
        user=UserResponse.from_doc(session.user),
        tokens=TokenPairResponse(
            access_token=session.tokens.access_token,
            refresh_token=session.tokens.refresh_token,
            expires_in=session.tokens.expires_in,
        ),
    )


@router.post(
    "/refresh", response_model=RefreshResponse, responses=error_responses(400, 401)
)
async def refresh(
    body: RefreshRequest, auth: AuthService = Depends(get_auth_service)
) -> RefreshResponse:
    access_token, expires_in = auth.refresh(body.refresh_token)
    return RefreshResponse(
        success=True,
        message="Token refreshed successfully",
        access_token=access_token,
        expires_in=expires_in,
    )


@router.get("/profile", response_model=ProfileResponse, responses=error_responses(401))
async def profile(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    user = await auth.profile(token)
    return ProfileResponse(success=True, user=UserResponse.from_doc(user))


@router.post(
    "/validate-token", response_model=ValidateTokenResponse, responses=error_responses(401)
)
async def validate_token(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> ValidateTokenResponse:
    claims = auth.validate_token(token)
    return ValidateTokenResponse(
        success=True,
        message="Token is valid",
        user=TokenUserResponse.from_claims(claims),
    )


@router.post(
    "/request-password-reset",
    response_model=MessageResponse,
    responses=error_responses(400),
)
async def request_password_reset(
    body: RequestPasswordResetRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.request_password_reset(body.email)
    return MessageResponse(success=True, message=PASSWORD_RESET_REQUESTED)


@router.post(
    "/reset-password", response_model=MessageResponse, responses=error_responses(400, 401)
)
async def reset_password(
    body: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.reset_password(body.email, body.code, body.password)
    return MessageResponse(success=True, message="Password updated successfully")


@router.get(
    "/code-stats", response_model=CodeStatsResponse, responses=error_responses(401)
)
async def code_stats(
    claims: dict[str, Any] = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
) -> CodeStatsResponse:
    stats = await auth.code_stats(str(claims["sub"]))
    return CodeStatsResponse(success=True, stats=stats)


@router.post(
    "/test-email", response_model=MessageResponse, responses=error_responses(400, 401)
)
async def send_test_email(
    body: SendTestEmailRequest,
    claims: dict[str, Any] = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    ok, message = await auth.send_test_email(body.email)
    return MessageResponse(success=ok, message=message)
