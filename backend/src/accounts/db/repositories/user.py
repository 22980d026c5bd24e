"""Repository for local user rows."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from accounts.db.models import User
from accounts.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Data access for the ``users`` table."""

    def __init__(self, session: Session):
        super().__init__(session, User)

    def find_by_username(self, username: str) -> Optional[User]:
        query = select(User).where(User.username == username)
        return self._session.execute(query).scalar_one_or_none()

    def create_user(self, username: str, email: str) -> User:
        """Insert an unconfirmed user row."""
        return self.create(User(username=username, email=email, confirmed=False))

    def mark_confirmed(self, username: str) -> bool:
        """Flag the user as confirmed.

        Returns:
            True if a row was updated, False if no such user exists.
        """
        result = self._session.execute(
            update(User).where(User.username == username).values(confirmed=True)
        )
        return bool(result.rowcount)
