"""
Verification code lifecycle: issue, consume, sweep.

Codes are 6 random digits, stored only as SHA-256 digests. Issuing a code
supersedes any active code of the same type for the same user, so only the
most recently emailed code can ever succeed.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta

from bson import ObjectId

from repositories.verification_code_repository import VerificationCodeRepository
from schemas.models.verification_code import CodeType, VerificationCodeDoc
from shared.crypto import hash_code
from shared.datetime_utils import utcnow
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)

CODE_LENGTH = 6


@dataclass(frozen=True)
class IssuedCode:
    code: str
    code_id: ObjectId
    code_type: CodeType
    expires_at: datetime


class VerificationService:
    def __init__(
        self,
        codes: VerificationCodeRepository,
        code_ttl_minutes: int = 10,
        max_attempts: int = 5,
    ) -> None:
        self._codes = codes
        self._ttl = timedelta(minutes=code_ttl_minutes)
        self._max_attempts = max_attempts

    async def issue_code(self, user_id: ObjectId, code_type: CodeType) -> IssuedCode:
        now = utcnow()
        code = generate_otp_code(CODE_LENGTH)
        doc = VerificationCodeDoc(
            user_id=user_id,
            code_hash=hash_code(code),
            code_type=code_type,
            expires_at=now + self._ttl,
            created_at=now,
        )
        stored = await self._codes.replace_active(doc, now)
        log.info(
            "verification_code_issued",
            user_id=str(user_id),
            code_id=str(stored.id),
            code_type=code_type.value,
        )
        return IssuedCode(
            code=code, code_id=stored.id, code_type=code_type, expires_at=stored.expires_at
        )

    async def consume_code(self, user_id: ObjectId, code_type: CodeType, code: str) -> bool:
        """Consume *code* if it is the active code of this type for the user.

        Every guess spends one attempt before the comparison, so once
        ``max_attempts`` guesses have been made the code is dead even for
        the right value.
        """
        now = utcnow()
        active = await self._codes.reserve_attempt(
            user_id, code_type, now, self._max_attempts
        )
        if active is None:
            log.warning(
                "verification_code_rejected",
                user_id=str(user_id),
                code_type=code_type.value,
                reason="no_active_code",
            )
            return False

        if hmac.compare_digest(active.code_hash, hash_code(code)):
            consumed = await self._codes.mark_used(active.id, now)
            if consumed is not None:
                log.info(
                    "verification_code_consumed",
                    user_id=str(user_id),
                    code_id=str(consumed.id),
                    code_type=code_type.value,
                )
                return True
            reason = "already_consumed"
        else:
            reason = "mismatch"

        locked = active.attempts >= self._max_attempts
        if locked and reason == "mismatch":
            await self._codes.invalidate(active.id)
        log.warning(
            "verification_code_rejected",
            user_id=str(user_id),
            code_type=code_type.value,
            reason=reason,
            attempts=active.attempts,
            locked=locked,
        )
        return False

    async def revoke(self, issued: IssuedCode) -> None:
        await self._codes.invalidate(issued.code_id)

    async def cleanup_expired(self) -> int:
        deleted = await self._codes.delete_expired(utcnow())
        log.info("verification_codes_swept", deleted_count=deleted)
        return deleted

    async def code_stats(self, user_id: ObjectId) -> dict[str, int]:
        return await self._codes.count_by_type(user_id)
