"""
Product endpoints.

GET  /products  — public listing
POST /products  — create a product (Bearer, 201)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from dependencies import get_current_claims, get_product_service
from schemas.dto.requests.product import CreateProductRequest
from schemas.dto.responses.common import error_responses
from schemas.dto.responses.product import (
    ProductCreatedResponse,
    ProductListResponse,
    ProductResponse,
)
from services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    products: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    items = await products.list_products()
    return ProductListResponse(
        success=True, data=[ProductResponse.from_doc(p) for p in items]
    )


@router.post(
    "",
    response_model=ProductCreatedResponse,
    status_code=201,
    responses=error_responses(400, 401),
)
async def create_product(
    body: CreateProductRequest,
    claims: dict[str, Any] = Depends(get_current_claims),
    products: ProductService = Depends(get_product_service),
) -> ProductCreatedResponse:
    product = await products.create_product(
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
        created_by=str(claims["sub"]),
    )
    return ProductCreatedResponse(success=True, data=ProductResponse.from_doc(product))
