"""
Unit of Work: manages repositories and transaction boundaries.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar
from sqlalchemy.orm.exc import StaleDataError
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.logging.logger import get_logger
from .change_tracker import ChangeTracker, EntityState, TrackedEntry, snapshot

R = TypeVar("R")

logger = get_logger("unit_of_work")


class UnitOfWork:
    """Manages related repositories with a shared session, change tracker and transaction scope.

    One instance per request; not safe for concurrent use.
    """

    def __init__(self, session: Optional[AsyncSession] = None):
        """Initialize UnitOfWork; session must be provided (e.g. UnitOfWork.from_session())."""
        if session is None:
            raise ValueError("Session must be provided. Use UnitOfWork.from_session() or pass session explicitly.")

        self.session = session
        self.tracker = ChangeTracker()
        self._repositories: Dict[type, object] = {}
        self._in_transaction = False

    @classmethod
    async def from_session(cls, session: AsyncSession) -> "UnitOfWork":
        """Create UnitOfWork from an existing session."""
        return cls(session=session)

    def get_repository(self, repo_class):
        """Get or create a repository instance (one per class, reused for the unit's lifetime)."""
        if repo_class not in self._repositories:
            self._repositories[repo_class] = repo_class(self.session, self.tracker)
        return self._repositories[repo_class]

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    # --- Persistence ---

    async def commit(self) -> int:
        """Persist every staged change atomically; returns the number of affected entities.

        Inside execute_in_transaction() this only flushes, the enclosing scope commits.
        """
        self.tracker.detect_changes()
        pending = self.tracker.pending()
        if not pending:
            return 0

        checkpoint = self.tracker.checkpoint()
        try:
            copies = await self._apply(pending)
            await self.session.flush()
            if not self._in_transaction:
                await self.session.commit()
        except BaseException as e:
            logger.error(f"Commit failed, {len(pending)} staged change(s) kept: {e!r}")
            # Inside a transaction scope the scope itself rolls back
            if not self._in_transaction:
                await self.session.rollback()
                self.tracker.restore_checkpoint(checkpoint)
            raise

        self.tracker.accept(pending)
        for persistent, deleted in copies:
            self.tracker.sync(persistent, deleted)
        logger.debug(f"Committed {len(pending)} change(s)")
        return len(pending)

    async def _apply(self, pending: List[TrackedEntry]) -> List[Tuple[object, bool]]:
        """Stamp audit columns and hand staged entries to the session.

        Returns the session copies that received a detached entity's values,
        each with a flag telling whether its row is being removed.
        """
        now = datetime.now(timezone.utc)
        copies = []
        for entry in pending:
            entity = entry.entity
            if entry.state is EntityState.ADDED:
                entity.created_at = now
                self.session.add(entity)
            elif entry.state is EntityState.MODIFIED:
                entity.updated_at = now
                # Creation stamp is never rewritten by an update
                if entry.original.get("created_at") is not None:
                    entity.created_at = entry.original["created_at"]
                persistent = await self._attach(entity)
                if persistent is not entity:
                    copies.append((persistent, False))
            elif entry.state is EntityState.DELETED:
                persistent = await self._attach(entity)
                await self.session.delete(persistent)
                if persistent is not entity:
                    copies.append((persistent, True))
        return copies

    async def _attach(self, entity):
        """Return the session-bound instance for an entity, copying a detached entity's values onto it."""
        if entity in self.session:
            return entity
        persistent = await self.session.get(type(entity), entity.id)
        if persistent is None:
            raise StaleDataError(f"{type(entity).__name__} {entity.id} no longer exists")
        for key, value in snapshot(entity).items():
            # Identity and creation stamp are never written by an update
            if key not in ("id", "created_at"):
                setattr(persistent, key, value)
        entity.created_at = persistent.created_at
        return persistent

    def rollback(self) -> None:
        """Discard staged changes in memory; durable storage is not touched."""
        discarded = self.tracker.reject_all()
        if discarded:
            logger.info(f"Rolled back {discarded} staged change(s)")

    # --- Explicit transactions ---

    @asynccontextmanager
    async def transaction(self):
        """Explicit transaction scope; nested scopes join the open one."""
        if self._in_transaction:
            yield self
            return

        checkpoint = self.tracker.checkpoint()
        self._in_transaction = True
        logger.debug("Transaction opened")
        try:
            yield self
            await self.commit()
            await self.session.commit()
            logger.debug("Transaction committed")
        except BaseException as e:
            logger.warning(f"Transaction rolled back: {e!r}")
            await self.session.rollback()
            self.tracker.restore_checkpoint(checkpoint)
            raise
        finally:
            self._in_transaction = False

    async def execute_in_transaction(self, operation: Callable[[], Awaitable[R]]) -> R:
        """Run an async operation inside a transaction and return its result.

        Failures roll the transaction back and are re-raised.
        """
        async with self.transaction():
            return await operation()

    # --- Disposal ---

    async def dispose(self) -> None:
        """Release the session; an open transaction is rolled back by closing it."""
        self.tracker.clear()
        self._repositories.clear()
        self._in_transaction = False
        await self.session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.rollback()
        await self.dispose()
