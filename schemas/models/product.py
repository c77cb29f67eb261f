"""
Product document model.

Maps to the `products` MongoDB collection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


class ProductDoc(MongoBaseModel):
    """Document model for the `products` collection."""

    name: str
    description: str
    price: float
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
