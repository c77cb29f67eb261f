"""
Async MongoDB access for the `verification-codes` collection.

Lifecycle guarantees live here rather than in the service:

- replace_active() invalidates every active code of a (user, type) pair and
  inserts the new one inside a single transaction, so concurrent logins can
  never leave two active codes behind.
- reserve_attempt() spends one unit of a code's attempt budget in a single
  conditional $inc before the caller compares hashes. Concurrent guesses
  each take their own slot, and once the budget is gone no guess (the
  correct one included) can reach the comparison.
- mark_used() is one conditional find_one_and_update, so a code can be
  consumed at most once even under concurrent verification.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.client_session import AsyncClientSession
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from schemas.models.verification_code import CodeType, VerificationCodeDoc


def _active_filter(user_id: ObjectId, code_type: CodeType, now: datetime) -> dict:
    return {
        "user_id": user_id,
        "code_type": code_type.value,
        "is_used": False,
        "expires_at": {"$gt": now},
    }


class VerificationCodeRepository:
    def __init__(
        self,
        collection: AsyncCollection,
        client: Optional[AsyncMongoClient] = None,
        use_transactions: bool = True,
    ) -> None:
        self._col = collection
        self._client = client
        self._use_transactions = use_transactions and client is not None

    async def replace_active(
        self, code: VerificationCodeDoc, now: datetime
    ) -> VerificationCodeDoc:
        """Supersede active codes of the same (user, type) and insert *code*."""

        async def _write(session: Optional[AsyncClientSession]) -> ObjectId:
            await self._col.update_many(
                _active_filter(code.user_id, code.code_type, now),
                {"$set": {"is_used": True}},
                session=session,
            )
            result = await self._col.insert_one(code.to_mongo(), session=session)
            return result.inserted_id

        if self._use_transactions:
            async with self._client.start_session() as session:
                inserted_id = await session.with_transaction(_write)
        else:
            inserted_id = await _write(None)
        return code.with_id(inserted_id)

    async def reserve_attempt(
        self,
        user_id: ObjectId,
        code_type: CodeType,
        now: datetime,
        max_attempts: int,
    ) -> Optional[VerificationCodeDoc]:
        """Take one guess slot on the active code and return it (post-$inc).

        Returns None when there is no active code or its budget is spent.
        """
        query = _active_filter(user_id, code_type, now)
        query["attempts"] = {"$lt": max_attempts}
        doc = await self._col.find_one_and_update(
            query,
            {"$inc": {"attempts": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return VerificationCodeDoc.from_mongo(doc)

    async def mark_used(
        self, code_id: ObjectId, now: datetime
    ) -> Optional[VerificationCodeDoc]:
        """Consume a code still active at *now*; None if another request won."""
        doc = await self._col.find_one_and_update(
            {"_id": code_id, "is_used": False, "expires_at": {"$gt": now}},
            {"$set": {"is_used": True, "used_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        return VerificationCodeDoc.from_mongo(doc)

    async def invalidate(self, code_id: ObjectId) -> bool:
        result = await self._col.update_one(
            {"_id": code_id, "is_used": False}, {"$set": {"is_used": True}}
        )
        return result.modified_count == 1

    async def delete_expired(self, now: datetime) -> int:
        result = await self._col.delete_many({"expires_at": {"$lt": now}})
        return result.deleted_count

    async def count_by_type(self, user_id: ObjectId) -> dict[str, int]:
        cursor = await self._col.aggregate(
            [
                {"$match": {"user_id": user_id}},
                {"$group": {"_id": "$code_type", "count": {"$sum": 1}}},
            ]
        )
        return {row["_id"]: row["count"] async for row in cursor}
