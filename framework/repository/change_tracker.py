"""
Change tracker: the in-memory staging area shared by the repositories of one Unit of Work.

Repositories record inserts, updates and deletes here; nothing reaches the
database session until UnitOfWork.commit() applies the pending entries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm.attributes import set_committed_value
from framework.domain.entity import EntityBase


class EntityState(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


def snapshot(entity: EntityBase) -> Dict[str, Any]:
    """Column values of an entity, keyed by attribute name."""
    mapper = sa_inspect(entity).mapper
    return {attr.key: entity.__dict__.get(attr.key) for attr in mapper.column_attrs}


@dataclass
class TrackedEntry:
    entity: EntityBase
    state: EntityState
    original: Dict[str, Any] = field(default_factory=dict)

    def has_changes(self) -> bool:
        return snapshot(self.entity) != self.original

    def restore(self) -> None:
        """Write the original values back onto the entity (identity excluded)."""
        for key, value in self.original.items():
            if key != "id" and self.entity.__dict__.get(key) != value:
                setattr(self.entity, key, value)


# entity, state, original values, current values
Checkpoint = Dict[int, Tuple[EntityBase, EntityState, Dict[str, Any], Dict[str, Any]]]


class ChangeTracker:
    """Tracks entities by object identity, since entity hashes change once ids are assigned."""

    def __init__(self):
        self._entries: Dict[int, TrackedEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, entity: EntityBase) -> Optional[TrackedEntry]:
        return self._entries.get(id(entity))

    def is_tracked(self, entity: EntityBase) -> bool:
        return id(entity) in self._entries

    def state_of(self, entity: EntityBase) -> Optional[EntityState]:
        entry = self.entry(entity)
        return entry.state if entry else None

    def attach(self, entity: EntityBase) -> TrackedEntry:
        """Start tracking an entity as unchanged, keeping its current values as the original."""
        entry = self.entry(entity)
        if entry is None:
            entry = TrackedEntry(entity, EntityState.UNCHANGED, snapshot(entity))
            self._entries[id(entity)] = entry
        return entry

    def add(self, entity: EntityBase) -> None:
        if not self.is_tracked(entity):
            self._entries[id(entity)] = TrackedEntry(entity, EntityState.ADDED)

    def mark_modified(self, entity: EntityBase) -> None:
        entry = self.attach(entity)
        if entry.state is EntityState.UNCHANGED:
            entry.state = EntityState.MODIFIED

    def mark_deleted(self, entity: EntityBase) -> None:
        entry = self.attach(entity)
        if entry.state is EntityState.ADDED:
            # Never persisted: removing it just drops the pending insert
            del self._entries[id(entity)]
        else:
            entry.state = EntityState.DELETED

    def detect_changes(self) -> None:
        """Promote unchanged entries whose values were edited in place to modified."""
        for entry in self._entries.values():
            if entry.state is EntityState.UNCHANGED and entry.has_changes():
                entry.state = EntityState.MODIFIED

    def pending(self) -> List[TrackedEntry]:
        return [entry for entry in self._entries.values() if entry.state is not EntityState.UNCHANGED]

    def accept(self, entries: Iterable[TrackedEntry]) -> None:
        """Mark entries as persisted: deleted ones are forgotten, the rest become unchanged."""
        for entry in entries:
            if entry.state is EntityState.DELETED:
                self._entries.pop(id(entry.entity), None)
            else:
                entry.state = EntityState.UNCHANGED
                entry.original = snapshot(entry.entity)

    def sync(self, entity: EntityBase, deleted: bool = False) -> None:
        """Re-baseline a tracked entity whose row was just written through another instance."""
        entry = self.entry(entity)
        if entry is None:
            return
        if deleted:
            del self._entries[id(entity)]
        else:
            entry.state = EntityState.UNCHANGED
            entry.original = snapshot(entity)

    def reject_all(self) -> int:
        """Discard every staged change; returns how many entries were reverted or dropped."""
        discarded = 0
        for key, entry in list(self._entries.items()):
            if entry.state is EntityState.ADDED:
                del self._entries[key]
                discarded += 1
                continue
            if entry.state is not EntityState.UNCHANGED or entry.has_changes():
                entry.restore()
                entry.state = EntityState.UNCHANGED
                discarded += 1
        return discarded

    def checkpoint(self) -> Checkpoint:
        """Capture states and values so a failed database transaction can be undone in memory."""
        return {
            key: (entry.entity, entry.state, dict(entry.original), snapshot(entry.entity))
            for key, entry in self._entries.items()
        }

    def restore_checkpoint(self, checkpoint: Checkpoint) -> None:
        """Return every entity to its checkpointed state after the session was rolled back.

        A session rollback expires persistent instances and strips flushed
        identities from new ones; committed values are rewritten first, then the
        staged values are replayed on top so the entity is dirty again.
        """
        self._entries = {}
        for key, (entity, state, original, current) in checkpoint.items():
            committed = current if state is EntityState.ADDED else original
            for name, value in committed.items():
                set_committed_value(entity, name, value)
            for name, value in current.items():
                if name != "id" and committed.get(name) != value:
                    setattr(entity, name, value)
            self._entries[key] = TrackedEntry(entity, state, original)

    def clear(self) -> None:
        self._entries.clear()
