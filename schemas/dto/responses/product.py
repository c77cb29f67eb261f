"""
Response DTOs for product and protected endpoints.

ProductResponse      — single product shape
ProductListResponse  — GET /products
ProductCreatedResponse — POST /products  (201)
DashboardResponse    — GET /protected/dashboard
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.dto.base import CamelModel
from schemas.dto.responses.auth import TokenUserResponse
from schemas.models.product import ProductDoc


class ProductResponse(CamelModel):
    id: str
    name: str
    description: str
    price: float
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, product: ProductDoc) -> "ProductResponse":
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(CamelModel):
    success: bool
    data: list[ProductResponse]


class ProductCreatedResponse(CamelModel):
    success: bool
    data: ProductResponse


class DashboardResponse(CamelModel):
    success: bool
    message: str
    user: TokenUserResponse
    timestamp: datetime
