"""
Collection names and index bootstrap, run once from the app lifespan.
"""

from __future__ import annotations

from pymongo import ASCENDING
from pymongo.asynchronous.database import AsyncDatabase

USERS_COLLECTION = "users"
VERIFICATION_CODES_COLLECTION = "verification-codes"
PRODUCTS_COLLECTION = "products"


async def ensure_indexes(db: AsyncDatabase) -> None:
    """Create the indexes the repositories rely on (idempotent)."""
    users = db[USERS_COLLECTION]
    await users.create_index([("email", ASCENDING)], unique=True)

    codes = db[VERIFICATION_CODES_COLLECTION]
    await codes.create_index(
        [
            ("user_id", ASCENDING),
            ("code_type", ASCENDING),
            ("is_used", ASCENDING),
            ("expires_at", ASCENDING),
        ]
    )
    await codes.create_index([("expires_at", ASCENDING)])

    products = db[PRODUCTS_COLLECTION]
    await products.create_index([("created_at", ASCENDING)])
