"""Product error catalogue."""

from framework.domain.result import Error, ErrorType


class ProductError:
    DESCRIPTION_IS_NULL = Error(
        code="Product.Description",
        description="Description cannot be null",
        type=ErrorType.VALIDATION,
    )

    PRICE_IS_LOWER_THAN_0 = Error(
        code="Product.Price",
        description="The price must be greater than 0",
        type=ErrorType.VALIDATION,
    )

    @staticmethod
    def description_too_long(max_length: int) -> Error:
        return Error(
            code="Product.Description",
            description=f"Description cannot exceed {max_length} characters",
            type=ErrorType.VALIDATION,
        )

    @staticmethod
    def not_found(id: int) -> Error:
        return Error(
            code="Product.NotFound",
            description=f"Product with {id} not found",
            type=ErrorType.NOT_FOUND,
        )
