"""
Verification code document model.

Maps to the `verification-codes` MongoDB collection.

Used for login MFA, password reset and email verification codes.
code_hash stores SHA-256(code); the plain 6-digit code is never stored.
is_used flips to True when the code is consumed or superseded by a newer
code of the same type. attempts counts the guesses made against the code.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from schemas.models.base import MongoBaseModel, PyObjectId
from shared.datetime_utils import ensure_utc


class CodeType(str, Enum):
    LOGIN_MFA = "LOGIN_MFA"
    PASSWORD_RESET = "PASSWORD_RESET"
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"


class VerificationCodeDoc(MongoBaseModel):
    """Document model for the `verification-codes` collection."""

    user_id: PyObjectId
    code_hash: str
    code_type: CodeType
    is_used: bool = False
    attempts: int = Field(default=0, ge=0)
    expires_at: datetime
    created_at: Optional[datetime] = None
    used_at: Optional[datetime] = None

    def to_mongo(self) -> dict:
        data = super().to_mongo()
        data["code_type"] = self.code_type.value
        return data

    @field_validator("expires_at", "created_at", "used_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)
