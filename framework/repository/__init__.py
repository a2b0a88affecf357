"""
Repository pattern: data access abstraction, decouples service layer from database session.
"""

from .base import BaseRepository, IRepository, normalize_page
from .change_tracker import ChangeTracker, EntityState
from .unit_of_work import UnitOfWork

__all__ = ["BaseRepository", "ChangeTracker", "EntityState", "IRepository", "UnitOfWork", "normalize_page"]
