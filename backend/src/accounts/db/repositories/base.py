"""Base repository with common operations.

Entity-specific repositories extend this class and share the caller's
session, so every statement joins the caller's transaction.
"""

from __future__ import annotations

from typing import Generic
from typing import Type
from typing import TypeVar

from sqlalchemy.orm import Session

from accounts.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository for one SQLAlchemy model.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages.
    """

    def __init__(self, session: Session, model: Type[T]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy session for database operations.
            model: The SQLAlchemy model class.
        """
        self._session = session
        self._model = model

    @property
    def session(self) -> Session:
        """Get the current session."""
        return self._session

    def create(self, entity: T) -> T:
        """Add a new entity and flush so generated fields are populated."""
        self._session.add(entity)
        self._session.flush()
        return entity

