from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from .models import Product


class CreateProductDto(BaseModel):
    # Optional so that a null description reaches domain validation (400) instead of 422
    description: Optional[str] = None
    price: Decimal = Field(description="Unit price, two decimal places")


class ProductViewModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    description: str
    price: Decimal

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        # JSON clients expect a number, pydantic would emit a string
        return float(price)

    @classmethod
    def from_entity(cls, product: Product) -> "ProductViewModel":
        return cls(id=product.id, description=product.description, price=product.price)


class ProductPage(BaseModel):
    items: List[ProductViewModel]
    total_count: int
    page: int
    page_size: int
