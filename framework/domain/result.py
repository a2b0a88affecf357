"""
Result / Error value types: expected failures are returned, not raised.
"""

from enum import Enum
from typing import Generic, Iterable, Optional, Tuple, TypeVar, Union
from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ErrorType(str, Enum):
    """Closed set of failure categories; each maps to one transport outcome."""
    VALIDATION = "Validation"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    FAILURE = "Failure"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.CONFLICT: 409,
    ErrorType.UNAUTHORIZED: 401,
    ErrorType.FORBIDDEN: 403,
    ErrorType.FAILURE: 500,
}


class Error(BaseModel):
    """Immutable (code, description, type) triple."""
    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    type: ErrorType


class InvalidResultOperation(RuntimeError):
    """Raised when a Result is built or read in a way its invariants forbid."""


class Result(Generic[T]):
    """Outcome of an operation: a success with an optional value, or a failure with errors.

    A success never carries errors and a failure always carries at least one.
    Reading ``value`` from a failure raises ``InvalidResultOperation``.
    """

    __slots__ = ("_is_success", "_value", "_errors")

    def __init__(self, is_success: bool, value: Optional[T] = None, errors: Optional[Iterable[Error]] = None):
        errors = tuple(errors or ())
        if is_success and errors:
            raise InvalidResultOperation("A successful result cannot contain errors.")
        if not is_success and not errors:
            raise InvalidResultOperation("A failure result must contain at least one error.")

        self._is_success = is_success
        self._value = value
        self._errors = errors

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(True, value=value)

    @classmethod
    def failure(cls, errors: Union[Error, Iterable[Error]]) -> "Result[T]":
        if isinstance(errors, Error):
            errors = (errors,)
        return cls(False, errors=errors)

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def errors(self) -> Tuple[Error, ...]:
        return self._errors

    @property
    def error(self) -> Optional[Error]:
        """First error, or None for a success."""
        return self._errors[0] if self._errors else None

    @property
    def value(self) -> T:
        if not self._is_success:
            raise InvalidResultOperation("Cannot access value of a failure result.")
        return self._value

    def __bool__(self) -> bool:
        return self._is_success

    def __repr__(self) -> str:
        if self._is_success:
            return f"Result.success({self._value!r})"
        return f"Result.failure({list(self._errors)!r})"
