"""
Domain building blocks: entity base, aggregate marker, Result/Error values.
"""

from .entity import AggregateRoot, EntityBase
from .result import Error, ErrorType, InvalidResultOperation, Result

__all__ = ["AggregateRoot", "EntityBase", "Error", "ErrorType", "InvalidResultOperation", "Result"]
