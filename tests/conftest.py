"""
Shared fixtures.

The in-memory repositories mirror the public methods of the real MongoDB
repositories (same arguments, same return values, same DuplicateKeyError on
a taken email) so services and routes can be exercised without a server.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

# Ensure a MONGODB_URI is present so AppSettings can be instantiated
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/")

from app import attach_services, register_routes  # noqa: E402
from config import (  # noqa: E402
    AppSettings,
    DatabaseSettings,
    JWTSettings,
    LoggingSettings,
    MfaSettings,
    SentrySettings,
    SmtpSettings,
)
from errors import register_error_handlers  # noqa: E402
from schemas.models.product import ProductDoc  # noqa: E402
from schemas.models.user import UserDoc  # noqa: E402
from schemas.models.verification_code import CodeType, VerificationCodeDoc  # noqa: E402


# ── In-memory repositories ────────────────────────────────────────────────────


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.docs: dict[ObjectId, UserDoc] = {}

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        email = email.strip().lower()
        return next((u for u in self.docs.values() if u.email == email), None)

    async def find_by_id(self, user_id: str) -> Optional[UserDoc]:
        if not ObjectId.is_valid(user_id):
            return None
        return self.docs.get(ObjectId(user_id))

    async def insert(self, user: UserDoc) -> UserDoc:
        if any(u.email == user.email for u in self.docs.values()):
            raise DuplicateKeyError("E11000 duplicate key error collection: users")
        stored = user.with_id(ObjectId())
        self.docs[stored.id] = stored
        return stored

    async def update_password(self, user_id: ObjectId, password_hash: str) -> bool:
        user = self.docs.get(user_id)
        if user is None:
            return False
        self.docs[user_id] = user.model_copy(update={"password_hash": password_hash})
        return True


class InMemoryVerificationCodeRepository:
    def __init__(self) -> None:
        self.docs: dict[ObjectId, VerificationCodeDoc] = {}

    def _active(
        self, user_id: ObjectId, code_type: CodeType, now: datetime
    ) -> list[VerificationCodeDoc]:
        return [
            d
            for d in self.docs.values()
            if d.user_id == user_id
            and d.code_type == code_type
            and not d.is_used
            and d.expires_at > now
        ]

    def _update(self, doc: VerificationCodeDoc, **changes) -> VerificationCodeDoc:
        updated = doc.model_copy(update=changes)
        self.docs[doc.id] = updated
        return updated

    async def replace_active(
        self, code: VerificationCodeDoc, now: datetime
    ) -> VerificationCodeDoc:
        for doc in self._active(code.user_id, code.code_type, now):
            self._update(doc, is_used=True)
        stored = code.with_id(ObjectId())
        self.docs[stored.id] = stored
        return stored

    async def reserve_attempt(
        self, user_id: ObjectId, code_type: CodeType, now: datetime, max_attempts: int
    ) -> Optional[VerificationCodeDoc]:
        for doc in self._active(user_id, code_type, now):
            if doc.attempts < max_attempts:
                return self._update(doc, attempts=doc.attempts + 1)
        return None

    async def mark_used(
        self, code_id: ObjectId, now: datetime
    ) -> Optional[VerificationCodeDoc]:
        doc = self.docs.get(code_id)
        if doc is None or doc.is_used or doc.expires_at <= now:
            return None
        return self._update(doc, is_used=True, used_at=now)

    async def invalidate(self, code_id: ObjectId) -> bool:
        doc = self.docs.get(code_id)
        if doc is None or doc.is_used:
            return False
        self._update(doc, is_used=True)
        return True

    async def delete_expired(self, now: datetime) -> int:
        expired = [k for k, d in self.docs.items() if d.expires_at < now]
        for key in expired:
            del self.docs[key]
        return len(expired)

    async def count_by_type(self, user_id: ObjectId) -> dict[str, int]:
        counts: dict[str, int] = {}
        for doc in self.docs.values():
            if doc.user_id == user_id:
                counts[doc.code_type.value] = counts.get(doc.code_type.value, 0) + 1
        return counts


class InMemoryProductRepository:
    def __init__(self) -> None:
        self.docs: list[ProductDoc] = []

    async def list_all(self) -> list[ProductDoc]:
        return sorted(self.docs, key=lambda p: p.created_at, reverse=True)

    async def insert(self, product: ProductDoc) -> ProductDoc:
        stored = product.with_id(ObjectId())
        self.docs.append(stored)
        return stored


class RecordingEmailProvider:
    """EmailProvider that records every message instead of sending it."""

    def __init__(self, deliver: bool = True, connection_ok: bool = True) -> None:
        self.deliver = deliver
        self.connection_ok = connection_ok
        self.sent: list[dict] = []

    def _record(self, kind: str, email: str, **extra) -> bool:
        self.sent.append({"kind": kind, "email": email, **extra})
        return self.deliver

    async def send_mfa_code(self, email: str, code: str, user_name=None) -> bool:
        return self._record("mfa", email, code=code, user_name=user_name)

    async def send_password_reset_code(self, email: str, code: str, user_name=None) -> bool:
        return self._record("password_reset", email, code=code, user_name=user_name)

    async def send_welcome_email(self, email: str, user_name=None) -> bool:
        return self._record("welcome", email, user_name=user_name)

    async def test_connection(self) -> bool:
        return self.connection_ok

    def last_code(self, kind: str = "mfa") -> str:
        return [m for m in self.sent if m["kind"] == kind][-1]["code"]


# ── Settings ──────────────────────────────────────────────────────────────────


def make_settings(**mfa_overrides) -> AppSettings:
    """AppSettings built from explicit values, independent of the environment."""
    mfa = {
        "mfa_code_expiration_minutes": 10,
        "mfa_max_attempts": 5,
        "mfa_require_email_delivery": False,
        "code_cleanup_interval_seconds": 3600,
    }
    mfa.update(mfa_overrides)
    return AppSettings(
        env="test",
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/", db_name="test"),
        jwt=JWTSettings(
            jwt_access_secret="test-access-secret-0123456789abcdef",
            jwt_refresh_secret="test-refresh-secret-0123456789abcdef",
            jwt_access_expiration="15m",
            jwt_refresh_expiration="7d",
        ),
        smtp=SmtpSettings(smtp_host="smtp.test.local", smtp_user="u", smtp_pass="p"),
        mfa=MfaSettings(**mfa),
        logging=LoggingSettings(),
        sentry=SentrySettings(sentry_dsn=""),
    )


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def settings(settings_factory) -> AppSettings:
    return settings_factory()


# ── Test application ──────────────────────────────────────────────────────────


class TestBackend:
    """Everything a test app is wired to, exposed for assertions."""

    __test__ = False

    def __init__(self, email: Optional[RecordingEmailProvider] = None) -> None:
        self.users = InMemoryUserRepository()
        self.codes = InMemoryVerificationCodeRepository()
        self.products = InMemoryProductRepository()
        self.email = email or RecordingEmailProvider()
        self.db = MagicMock()
        self.db.client.admin.command = AsyncMock(return_value={"ok": 1})


def build_test_app(settings: AppSettings, backend: TestBackend) -> FastAPI:
    """
    Build the real routes and error handlers over in-memory repositories.
    No real network connections are made.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = backend.db
        attach_services(
            app,
            settings,
            users=backend.users,
            codes=backend.codes,
            products=backend.products,
            email=backend.email,
        )
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    register_routes(app)
    return app


@pytest.fixture
def backend() -> TestBackend:
    return TestBackend()


@pytest.fixture
def client(settings, backend):
    with TestClient(build_test_app(settings, backend)) as c:
        yield c
