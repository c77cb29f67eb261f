"""Product catalogue used by the sample protected/public endpoints."""

from __future__ import annotations

from repositories.product_repository import ProductRepository
from schemas.models.product import ProductDoc
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class ProductService:
    def __init__(self, products: ProductRepository) -> None:
        self._products = products

    async def list_products(self) -> list[ProductDoc]:
        return await self._products.list_all()

    async def create_product(
        self,
        name: str,
        description: str,
        price: float,
        stock: int,
        created_by: str,
    ) -> ProductDoc:
        now = utcnow()
        product = ProductDoc(
            name=name.strip(),
            description=description.strip(),
            price=price,
            stock=stock,
            created_at=now,
            updated_at=now,
        )
        product = await self._products.insert(product)
        log.info("product_created", product_id=str(product.id), created_by=created_by)
        return product
