"""
Entity base shared by every persisted aggregate: identity, audit stamps, soft-delete flag.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class AggregateRoot:
    """Marker: only aggregate roots get a repository of their own."""


class EntityBase(SQLModel):
    """Common columns and identity-based equality.

    ``id`` is None until the row is first flushed and cannot be rebound once
    assigned. ``created_at`` / ``updated_at`` are stamped by the Unit of Work
    on commit, never by callers.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    is_deleted: bool = Field(default=False, index=True)

    @property
    def is_transient(self) -> bool:
        return not self.id

    def __setattr__(self, name, value):
        if name == "id":
            current = self.__dict__.get("id")
            if current and value != current:
                raise AttributeError(
                    f"{type(self).__name__}.id is already assigned ({current}) and cannot change"
                )
        super().__setattr__(name, value)

    def __eq__(self, other):
        if not isinstance(other, EntityBase):
            return NotImplemented
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        # Transient entities only equal themselves
        if self.is_transient or other.is_transient:
            return False
        return self.id == other.id

    def __hash__(self):
        if self.is_transient:
            raise TypeError(f"Transient {type(self).__name__} instances are unhashable")
        return hash((type(self), self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, is_deleted={self.is_deleted})"
