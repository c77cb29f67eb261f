"""
Access / refresh JWT issuance and verification.

Both token kinds carry the same identity claims
``{sub, email, firstName?, lastName?}`` plus ``type``, ``iat`` and ``exp``.
They are signed with different secrets and have different lifetimes, so a
refresh token never verifies as an access token and vice versa.

Tokens are stateless bearer credentials: there is no revocation list and
refresh does not rotate the refresh token.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

import jwt

from config import JWTSettings
from schemas.models.user import UserDoc
from shared.datetime_utils import utcnow

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"

_IDENTITY_CLAIMS = ("sub", "email", "firstName", "lastName")


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


class TokenService:
    def __init__(self, settings: JWTSettings) -> None:
        if not settings.jwt_access_secret or not settings.jwt_refresh_secret:
            raise RuntimeError(
                "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must both be set"
            )
        self._settings = settings
        self._algorithm = settings.jwt_algorithm
        self._access_ttl = settings.access_ttl_seconds
        self._refresh_ttl = settings.refresh_ttl_seconds

    @property
    def access_ttl_seconds(self) -> int:
        return self._access_ttl

    @staticmethod
    def identity_claims(user: UserDoc) -> dict[str, Any]:
        claims: dict[str, Any] = {"sub": str(user.id), "email": user.email}
        if user.first_name:
            claims["firstName"] = user.first_name
        if user.last_name:
            claims["lastName"] = user.last_name
        return claims

    def _encode(
        self,
        identity: dict[str, Any],
        token_type: str,
        secret: str,
        ttl_seconds: int,
        now: Optional[datetime] = None,
    ) -> str:
        now = now or utcnow()
        claims = {
            **identity,
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
        }
        return jwt.encode(claims, secret, algorithm=self._algorithm)

    def _decode(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[self._algorithm],
            options={"require": ["sub", "exp", "iat"]},
        )
        if claims.get("type") != expected_type:
            raise jwt.InvalidTokenError(f"Not an {expected_type} token")
        return claims

    def create_access_token(self, identity: dict[str, Any], now: Optional[datetime] = None) -> str:
        return self._encode(
            identity, TOKEN_TYPE_ACCESS, self._settings.jwt_access_secret, self._access_ttl, now
        )

    def create_refresh_token(self, identity: dict[str, Any], now: Optional[datetime] = None) -> str:
        return self._encode(
            identity, TOKEN_TYPE_REFRESH, self._settings.jwt_refresh_secret, self._refresh_ttl, now
        )

    def issue_pair(self, user: UserDoc) -> TokenPair:
        identity = self.identity_claims(user)
        now = utcnow()
        return TokenPair(
            access_token=self.create_access_token(identity, now),
            refresh_token=self.create_refresh_token(identity, now),
            expires_in=self._access_ttl,
        )

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Decode an access token.

        Raises:
            jwt.InvalidTokenError: bad signature, expired, malformed, or a
                refresh token presented as an access token.
        """
        return self._decode(token, self._settings.jwt_access_secret, TOKEN_TYPE_ACCESS)

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """Decode a refresh token. Raises ``jwt.InvalidTokenError`` on failure."""
        return self._decode(token, self._settings.jwt_refresh_secret, TOKEN_TYPE_REFRESH)

    def refresh_access_token(self, refresh_token: str) -> tuple[str, int]:
        """Mint a new access token from a valid refresh token.

        Only the identity claims are carried over; ``iat``/``exp`` are fresh.
        """
        claims = self.verify_refresh_token(refresh_token)
        identity = {k: claims[k] for k in _IDENTITY_CLAIMS if k in claims}
        return self.create_access_token(identity), self._access_ttl

    @staticmethod
    def extract_bearer(authorization: Optional[str]) -> Optional[str]:
        """Return the token from an ``Authorization: Bearer <token>`` header."""
        if not authorization:
            return None
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()
