"""Product module repository implementation."""

from typing import List, Optional
from decimal import Decimal
from framework.repository.base import BaseRepository
from .models import Product


class ProductRepository(BaseRepository[Product]):
    """Product repository."""

    def __init__(self, session, tracker):
        super().__init__(session, Product, tracker)

    async def get_by_description(self, description: str) -> Optional[Product]:
        """Find the active product with this exact description."""
        return await self.single_or_default(Product.description == description)

    async def find_by_price_range(self, min_price: Decimal, max_price: Decimal) -> List[Product]:
        """Active products priced within [min_price, max_price], cheapest first."""
        statement = (
            self.get()
            .where(Product.price >= min_price, Product.price <= max_price)
            .order_by(Product.price.asc())
        )
        return await self.to_list(statement)
