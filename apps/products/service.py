from decimal import Decimal
from typing import Optional, Union
from framework.domain.result import Result
from framework.logging.logger import get_logger
from framework.repository.base import normalize_page
from framework.repository.unit_of_work import UnitOfWork
from .errors import ProductError
from .models import Product
from .repository import ProductRepository
from .schemas import ProductPage, ProductViewModel

logger = get_logger("product_service")


class ProductService:
    """Product use cases; expected failures come back as Result failures, never as exceptions."""

    def __init__(self, uow: UnitOfWork):
        """Initialize ProductService with UnitOfWork."""
        self.uow = uow

    @property
    def products(self) -> ProductRepository:
        return self.uow.get_repository(ProductRepository)

    async def create(
        self, description: Optional[str], price: Union[Decimal, int, float, str]
    ) -> Result[ProductViewModel]:
        """Validate and persist a new product; storage is untouched when validation fails."""
        product_result = Product.create(description, price)
        if product_result.is_failure:
            logger.info(f"Product rejected: {[error.code for error in product_result.errors]}")
            return Result.failure(product_result.errors)

        product = product_result.value
        self.products.add(product)
        await self.uow.commit()

        logger.info(f"Product {product.id} created")
        return Result.success(ProductViewModel.from_entity(product))

    async def get_by_id(self, id: int) -> Result[ProductViewModel]:
        product = await self.products.get_by_id(id)
        if product is None:
            return Result.failure(ProductError.not_found(id))
        return Result.success(ProductViewModel.from_entity(product))

    async def list_products(self, page_number: int = 1, page_size: int = 10) -> Result[ProductPage]:
        """One page of active products, oldest first."""
        page_number, page_size = normalize_page(page_number, page_size)
        items, total_count = await self.products.get_paged(page_number, page_size)
        return Result.success(
            ProductPage(
                items=[ProductViewModel.from_entity(product) for product in items],
                total_count=total_count,
                page=page_number,
                page_size=page_size,
            )
        )

    async def delete(self, id: int) -> Result[None]:
        """Soft-delete a product; the row stays in storage."""
        product = await self.products.get_by_id(id)
        if product is None:
            return Result.failure(ProductError.not_found(id))

        self.products.delete(product)
        await self.uow.commit()

        logger.info(f"Product {id} deleted")
        return Result.success()
