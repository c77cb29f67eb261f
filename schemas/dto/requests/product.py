"""
Request DTOs for product endpoints.

CreateProductRequest — POST /products
"""

from __future__ import annotations

from pydantic import Field

from schemas.dto.base import CamelModel


class CreateProductRequest(CamelModel):
    """Request body for POST /products."""

    name: str = Field(min_length=3, max_length=255)
    description: str = Field(min_length=3, max_length=255)
    price: float = Field(ge=0, le=1_000_000)
    stock: int = Field(ge=0, le=100)
