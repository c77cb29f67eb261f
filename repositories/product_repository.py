"""
Async MongoDB access for the `products` collection.
"""

from __future__ import annotations

from pymongo import DESCENDING
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.product import ProductDoc


class ProductRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def list_all(self) -> list[ProductDoc]:
        cursor = self._col.find({}).sort("created_at", DESCENDING)
        return [ProductDoc.from_mongo(doc) async for doc in cursor]

    async def insert(self, product: ProductDoc) -> ProductDoc:
        result = await self._col.insert_one(product.to_mongo())
        return product.with_id(result.inserted_id)
