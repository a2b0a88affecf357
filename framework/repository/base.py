"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Generic, Iterable, List, Optional, Tuple, Type, TypeVar, Union
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.sql.expression import SelectOfScalar
from framework.domain.entity import AggregateRoot, EntityBase
from .change_tracker import ChangeTracker

T = TypeVar("T", bound=EntityBase)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API.

    Predicates are SQLAlchemy boolean expressions such as ``Product.price > 10``.
    Writes only stage changes; UnitOfWork.commit() persists them.
    """

    @abstractmethod
    def get(self, include_deleted: bool = False) -> SelectOfScalar[T]:
        """Lazy, composable statement over the active rows."""
        pass

    @abstractmethod
    async def get_by_id(self, id: int) -> Optional[T]:
        """Get entity by ID (tracked)."""
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """Get all active entities."""
        pass

    @abstractmethod
    async def find(self, predicate) -> List[T]:
        """Get entities matching a predicate."""
        pass

    @abstractmethod
    async def single_or_default(self, predicate) -> Optional[T]:
        """Get the only match, None without one; MultipleResultsFound if ambiguous."""
        pass

    @abstractmethod
    async def exists(self, predicate) -> bool:
        pass

    @abstractmethod
    async def count(self, predicate=None) -> int:
        pass

    @abstractmethod
    async def get_paged(
        self,
        page_number: int,
        page_size: int,
        predicate=None,
        order_by=None,
        ascending: bool = True,
    ) -> Tuple[List[T], int]:
        """Get one page and the total number of matching rows."""
        pass

    @abstractmethod
    def add(self, entity: T) -> None:
        pass

    @abstractmethod
    def add_range(self, entities: Iterable[T]) -> None:
        pass

    @abstractmethod
    def update(self, entity: T) -> None:
        pass

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Soft delete."""
        pass

    @abstractmethod
    def hard_delete(self, entity: T) -> None:
        pass

    @abstractmethod
    def delete_range(self, entities: Iterable[T]) -> None:
        pass


def normalize_page(page_number: int, page_size: int) -> Tuple[int, int]:
    """Clamp paging input: page >= 1, size defaults to 10 and never exceeds 100."""
    if page_number < 1:
        page_number = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page_number, page_size


class BaseRepository(IRepository[T]):
    """Generic repository over SQLModel; subclasses can add custom queries.

    Every read path is filtered on ``is_deleted == False``. Bulk reads return
    detached entities, so editing them has no effect until ``update()`` is
    called; ``get_by_id`` results stay attached and tracked.
    """

    def __init__(self, session: AsyncSession, model: Type[T], tracker: ChangeTracker):
        """Initialize repository with session, model and the unit of work's change tracker."""
        if not (issubclass(model, EntityBase) and issubclass(model, AggregateRoot)):
            raise TypeError(f"{model.__name__} must be an EntityBase aggregate root")
        self.session = session
        self.model = model
        self.tracker = tracker

    # --- Reads ---

    def _conditions(self, predicate=None, include_deleted: bool = False) -> list:
        conditions = []
        if not include_deleted:
            conditions.append(self.model.is_deleted == False)  # noqa: E712
        if predicate is not None:
            conditions.append(predicate)
        return conditions

    def get(self, include_deleted: bool = False) -> SelectOfScalar[T]:
        """Lazy statement over the active rows; compose with .where()/.order_by() then to_list()."""
        return select(self.model).where(*self._conditions(include_deleted=include_deleted))

    async def to_list(self, statement: SelectOfScalar[T]) -> List[T]:
        """Execute a statement and return untracked entities."""
        result = await self.session.exec(statement)
        return [self._detach(entity) for entity in result.all()]

    def _detach(self, entity: T) -> T:
        # Entities tracked by the unit of work stay attached to the session
        if not self.tracker.is_tracked(entity) and entity in self.session:
            self.session.expunge(entity)
        return entity

    async def get_by_id(self, id: int) -> Optional[T]:
        """Get entity by ID; the entity is tracked for later mutation."""
        statement = self.get().where(self.model.id == id)
        result = await self.session.exec(statement)
        entity = result.first()
        if entity is not None:
            self.tracker.attach(entity)
        return entity

    async def get_all(self) -> List[T]:
        return await self.to_list(self.get())

    async def find(self, predicate) -> List[T]:
        return await self.to_list(self.get().where(predicate))

    async def single_or_default(self, predicate) -> Optional[T]:
        """Single match or None; raises sqlalchemy.exc.MultipleResultsFound if more than one row matches."""
        result = await self.session.exec(self.get().where(predicate).limit(2))
        entity = result.one_or_none()
        return self._detach(entity) if entity is not None else None

    async def exists(self, predicate) -> bool:
        statement = select(self.model.id).where(*self._conditions(predicate)).limit(1)
        result = await self.session.exec(statement)
        return result.first() is not None

    async def count(self, predicate=None) -> int:
        """Count active entities, optionally filtered."""
        statement = select(func.count(self.model.id)).where(*self._conditions(predicate))
        result = await self.session.exec(statement)
        return result.one()

    def _order_column(self, order_by: Union[str, Any]):
        if isinstance(order_by, str):
            if order_by not in self.model.model_fields:
                raise ValueError(f"{self.model.__name__} has no field '{order_by}'")
            return getattr(self.model, order_by)
        return order_by

    async def get_paged(
        self,
        page_number: int,
        page_size: int,
        predicate=None,
        order_by=None,
        ascending: bool = True,
    ) -> Tuple[List[T], int]:
        """Get one page of active entities plus the total count of the filtered set."""
        page_number, page_size = normalize_page(page_number, page_size)
        conditions = self._conditions(predicate)

        # Total before offset/limit so callers can compute the number of pages
        total_count = await self.count(predicate)

        column = self._order_column(order_by if order_by is not None else "id")
        statement = (
            select(self.model)
            .where(*conditions)
            .order_by(column.asc() if ascending else column.desc())
            .offset((page_number - 1) * page_size)
            .limit(page_size)
        )
        items = await self.to_list(statement)
        return items, total_count

    # --- Writes: only stage changes, UnitOfWork.commit() persists them ---

    def add(self, entity: T) -> None:
        self.tracker.add(entity)

    def add_range(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.add(entity)

    def update(self, entity: T) -> None:
        """Mark the whole entity as modified."""
        self.tracker.mark_modified(entity)

    def delete(self, entity: T) -> None:
        """Soft delete: flag the row and stage it as modified; the row is kept."""
        # Track before mutating so rollback() can restore the flag
        self.tracker.attach(entity)
        entity.is_deleted = True
        entity.updated_at = datetime.now(timezone.utc)
        self.update(entity)

    def hard_delete(self, entity: T) -> None:
        """Stage physical removal of the row."""
        self.tracker.mark_deleted(entity)

    def delete_range(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.delete(entity)
