from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union
from sqlmodel import Field
from framework.domain.entity import AggregateRoot, EntityBase
from framework.domain.result import Error, Result
from .errors import ProductError

DESCRIPTION_MAX_LENGTH = 256


class Product(EntityBase, AggregateRoot, table=True):
    """Product aggregate. Build instances with Product.create(), which enforces the invariants."""
    __tablename__ = "products"

    description: str = Field(max_length=DESCRIPTION_MAX_LENGTH, nullable=False, description="Product description")
    price: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2, description="Unit price")

    @classmethod
    def create(cls, description: Optional[str], price: Union[Decimal, int, float, str]) -> Result["Product"]:
        """Validate description and price; return every violated rule or a new transient product."""
        price = _to_decimal(price)
        errors: List[Error] = []

        if description is None or not description.strip():
            errors.append(ProductError.DESCRIPTION_IS_NULL)
        elif len(description) > DESCRIPTION_MAX_LENGTH:
            errors.append(ProductError.description_too_long(DESCRIPTION_MAX_LENGTH))

        if price < 0:
            errors.append(ProductError.PRICE_IS_LOWER_THAN_0)

        if errors:
            return Result.failure(errors)
        return Result.success(cls(description=description, price=price))


def _to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(value, Decimal):
        price = value
    else:
        try:
            # str() first so 9.99 stays 9.99 instead of its binary expansion
            price = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid price: {value!r}") from None
    if not price.is_finite():
        raise ValueError(f"Price must be a finite number: {value!r}")
    return price
