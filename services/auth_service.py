"""
Authentication flows: register, two-step MFA login, refresh, profile and
password reset.

Login is split in two requests. ``login`` checks the password and emails a
one-time code; ``verify_mfa`` exchanges that code for a token pair. The
temp token returned by ``login`` only correlates the two steps on the
client and grants nothing by itself.

Failures of the password, code or token checks all raise
AuthenticationError with a generic message; the precise reason goes to the
log only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import jwt
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from errors import AuthenticationError, ConflictError, EmailDeliveryError
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from schemas.models.verification_code import CodeType
from services.token_service import TokenPair, TokenService
from services.verification_service import VerificationService
from shared.crypto import hash_password, verify_password
from shared.datetime_utils import utcnow
from shared.generators import generate_otp_code, generate_temp_token
from shared.logging import get_logger, log_with_context

log = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_CODE = "Invalid or expired verification code"
INVALID_TOKEN = "Invalid or expired token"


@dataclass(frozen=True)
class LoginChallenge:
    temp_token: str
    expires_at: datetime
    email_sent: bool


@dataclass(frozen=True)
class AuthenticatedSession:
    user: UserDoc
    tokens: TokenPair


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        verification: VerificationService,
        tokens: TokenService,
        email: EmailProvider,
        require_mfa_delivery: bool = False,
    ) -> None:
        self._users = users
        self._verification = verification
        self._tokens = tokens
        self._email = email
        self._require_mfa_delivery = require_mfa_delivery

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserDoc:
        email = self._normalize_email(email)
        if await self._users.find_by_email(email) is not None:
            log.warning("registration_failed", reason="email_exists")
            raise ConflictError("Email is already registered", field="email")

        now = utcnow()
        user = UserDoc(
            email=email,
            password_hash=hash_password(password),
            first_name=(first_name or "").strip() or None,
            last_name=(last_name or "").strip() or None,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        try:
            user = await self._users.insert(user)
        except DuplicateKeyError:
            # Another request registered the same email between check and insert
            log.warning("registration_failed", reason="race_condition_duplicate")
            raise ConflictError("Email is already registered", field="email")

        log.info("user_registered", user_id=str(user.id))

        try:
            sent = await self._email.send_welcome_email(user.email, user.display_name)
        except Exception as e:
            log.warning("welcome_email_failed", user_id=str(user.id), error=str(e))
        else:
            if not sent:
                log.warning("welcome_email_failed", user_id=str(user.id))
        return user

    async def _check_credentials(self, email: str, password: str) -> UserDoc:
        user = await self._users.find_by_email(self._normalize_email(email))
        if user is None:
            log.warning("login_failed", reason="unknown_email")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.is_active:
            log.warning("login_failed", reason="inactive", user_id=str(user.id))
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            log.warning("login_failed", reason="invalid_password", user_id=str(user.id))
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    async def login(self, email: str, password: str) -> LoginChallenge:
        """Step 1: check the password and email a LOGIN_MFA code."""
        user = await self._check_credentials(email, password)
        ulog = log_with_context(log, user_id=str(user.id))
        issued = await self._verification.issue_code(user.id, CodeType.LOGIN_MFA)

        sent = await self._email.send_mfa_code(user.email, issued.code, user.display_name)
        if not sent:
            ulog.error("mfa_code_delivery_failed", enforced=self._require_mfa_delivery)
            if self._require_mfa_delivery:
                await self._verification.revoke(issued)
                raise EmailDeliveryError(
                    "Could not send the verification code. Please try again later."
                )

        ulog.info("login_code_issued", email_sent=sent)
        return LoginChallenge(
            temp_token=generate_temp_token(),
            expires_at=issued.expires_at,
            email_sent=sent,
        )

    async def _active_user_by_email(self, email: str, failure_message: str) -> UserDoc:
        user = await self._users.find_by_email(self._normalize_email(email))
        if user is None or not user.is_active:
            log.warning("code_verification_failed", reason="unknown_or_inactive_user")
            raise AuthenticationError(failure_message)
        return user

    async def verify_mfa(self, email: str, code: str) -> AuthenticatedSession:
        """Step 2: exchange the emailed code for an access/refresh pair."""
        user = await self._active_user_by_email(email, INVALID_CODE)
        if not await self._verification.consume_code(user.id, CodeType.LOGIN_MFA, code):
            raise AuthenticationError(INVALID_CODE)

        tokens = self._tokens.issue_pair(user)
        log.info("login_success", user_id=str(user.id), auth_method="password+email_otp")
        return AuthenticatedSession(user=user, tokens=tokens)

    def refresh(self, refresh_token: str) -> tuple[str, int]:
        try:
            access_token, expires_in = self._tokens.refresh_access_token(refresh_token)
        except jwt.InvalidTokenError as e:
            log.warning("token_refresh_failed", reason=type(e).__name__)
            raise AuthenticationError(INVALID_TOKEN)
        return access_token, expires_in

    def authenticate(self, access_token: Optional[str]) -> dict[str, Any]:
        """Return the claims of a valid access token or raise 401."""
        if not access_token:
            raise AuthenticationError("Missing access token")
        try:
            return self._tokens.verify_access_token(access_token)
        except jwt.InvalidTokenError as e:
            log.warning("access_token_rejected", reason=type(e).__name__)
            raise AuthenticationError(INVALID_TOKEN)

    def validate_token(self, access_token: Optional[str]) -> dict[str, Any]:
        claims = self.authenticate(access_token)
        log.info("access_token_validated", user_id=claims.get("sub"))
        return claims

    async def profile(self, access_token: Optional[str]) -> UserDoc:
        claims = self.authenticate(access_token)
        user = await self._users.find_by_id(str(claims["sub"]))
        if user is None or not user.is_active:
            log.warning("profile_lookup_failed", user_id=claims.get("sub"))
            raise AuthenticationError("User not found or inactive")
        return user

    async def request_password_reset(self, email: str) -> None:
        """Email a PASSWORD_RESET code when the account exists.

        Returns normally either way so callers cannot probe for accounts.
        """
        user = await self._users.find_by_email(self._normalize_email(email))
        if user is None or not user.is_active:
            log.info("password_reset_requested", account_found=False)
            return

        issued = await self._verification.issue_code(user.id, CodeType.PASSWORD_RESET)
        sent = await self._email.send_password_reset_code(
            user.email, issued.code, user.display_name
        )
        if not sent:
            log.error("password_reset_delivery_failed", user_id=str(user.id))
        log.info("password_reset_requested", account_found=True, user_id=str(user.id))

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        user = await self._active_user_by_email(email, INVALID_CODE)
        if not await self._verification.consume_code(user.id, CodeType.PASSWORD_RESET, code):
            raise AuthenticationError(INVALID_CODE)

        await self._users.update_password(user.id, hash_password(new_password))
        log.info("password_reset_completed", user_id=str(user.id))

    async def code_stats(self, user_id: str) -> dict[str, int]:
        if not ObjectId.is_valid(user_id):
            raise AuthenticationError(INVALID_TOKEN)
        return await self._verification.code_stats(ObjectId(user_id))

    async def send_test_email(self, email: str) -> tuple[bool, str]:
        if not await self._email.test_connection():
            return False, "Email configuration error"

        sent = await self._email.send_mfa_code(email, generate_otp_code(), "Test User")
        if sent:
            log.info("test_email_sent", to_email=email)
            return True, "Test email sent"
        log.warning("test_email_failed", to_email=email)
        return False, "Failed to send test email"
