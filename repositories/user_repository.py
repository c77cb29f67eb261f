"""
Async MongoDB access for the `users` collection.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.user import UserDoc
from shared.datetime_utils import utcnow


class UserRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        doc = await self._col.find_one({"email": email.strip().lower()})
        return UserDoc.from_mongo(doc)

    async def find_by_id(self, user_id: str) -> Optional[UserDoc]:
        if not ObjectId.is_valid(user_id):
            return None
        doc = await self._col.find_one({"_id": ObjectId(user_id)})
        return UserDoc.from_mongo(doc)

    async def insert(self, user: UserDoc) -> UserDoc:
        """Insert *user* and return it with its generated id.

        Raises:
            pymongo.errors.DuplicateKeyError: when the email is already taken
                (enforced by the unique index on ``email``).
        """
        result = await self._col.insert_one(user.to_mongo())
        return user.with_id(result.inserted_id)

    async def update_password(self, user_id: ObjectId, password_hash: str) -> bool:
        result = await self._col.update_one(
            {"_id": user_id},
            {"$set": {"password_hash": password_hash, "updated_at": utcnow()}},
        )
        return result.modified_count == 1
