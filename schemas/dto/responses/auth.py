"""
Response DTOs for authentication endpoints.

UserResponse            — public user shape (register / verify-mfa / profile)
TokenUserResponse       — user shape decoded from access-token claims
TokenPairResponse       — access + refresh tokens issued after MFA
RegisterResponse        — POST /auth/register  (201)
LoginResponse           — POST /auth/login  (200)
VerifyMfaResponse       — POST /auth/verify-mfa  (200)
RefreshResponse         — POST /auth/refresh  (200)
ProfileResponse         — GET /auth/profile  (200)
ValidateTokenResponse   — POST /auth/validate-token  (200)
CodeStatsResponse       — GET /auth/code-stats  (200)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from schemas.dto.base import CamelModel
from schemas.models.user import UserDoc


class UserResponse(CamelModel):
    """User profile shape; never includes the password hash."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, user: UserDoc) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_active=user.is_active,
            created_at=user.created_at,
        )


class TokenUserResponse(CamelModel):
    """User identity as carried in access-token claims."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "TokenUserResponse":
        return cls(
            id=str(claims["sub"]),
            email=claims["email"],
            first_name=claims.get("firstName"),
            last_name=claims.get("lastName"),
        )


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int


class RegisterResponse(CamelModel):
    """Response body for POST /auth/register (201)."""

    success: bool
    message: str
    user: UserResponse


class LoginResponse(CamelModel):
    """Response body for POST /auth/login (200).

    The MFA code itself is never part of this response; ``email_sent``
    reports whether the code email was accepted by the mail server.
    """

    success: bool
    message: str
    temp_token: str
    expires_at: datetime
    email_sent: bool


class VerifyMfaResponse(CamelModel):
    """Response body for POST /auth/verify-mfa (200)."""

    success: bool
    message: str
    user: UserResponse
    tokens: TokenPairResponse


class RefreshResponse(CamelModel):
    """Response body for POST /auth/refresh (200)."""

    success: bool
    message: str
    access_token: str
    expires_in: int


class ProfileResponse(CamelModel):
    success: bool
    user: UserResponse


class ValidateTokenResponse(CamelModel):
    success: bool
    message: str
    user: TokenUserResponse


class CodeStatsResponse(CamelModel):
    success: bool
    stats: dict[str, int]
