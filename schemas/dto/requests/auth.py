"""
Request DTOs for authentication endpoints.

RegisterRequest               — POST /auth/register
LoginRequest                  — POST /auth/login
VerifyMfaRequest              — POST /auth/verify-mfa
RefreshRequest                — POST /auth/refresh
RequestPasswordResetRequest   — POST /auth/request-password-reset
ResetPasswordRequest          — POST /auth/reset-password
SendTestEmailRequest          — POST /auth/test-email
"""

from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field

from schemas.dto.base import CamelModel

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
CODE_PATTERN = r"^\d{6}$"


class RegisterRequest(CamelModel):
    """Request body for POST /auth/register."""

    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(CamelModel):
    """Request body for POST /auth/login."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


class VerifyMfaRequest(CamelModel):
    """Request body for POST /auth/verify-mfa.

    ``code`` is the 6-digit code emailed after a successful password check.
    """

    email: EmailStr
    code: str = Field(pattern=CODE_PATTERN)


class RefreshRequest(CamelModel):
    """Request body for POST /auth/refresh."""

    refresh_token: str = Field(min_length=1)


class RequestPasswordResetRequest(CamelModel):
    """Request body for POST /auth/request-password-reset."""

    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Request body for POST /auth/reset-password."""

    email: EmailStr
    code: str = Field(pattern=CODE_PATTERN)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class SendTestEmailRequest(CamelModel):
    """Request body for POST /auth/test-email."""

    email: EmailStr
