"""Repository pattern implementations for database operations."""

from accounts.db.repositories.base import BaseRepository
from accounts.db.repositories.login_attempt import LoginAttemptRepository
from accounts.db.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "LoginAttemptRepository",
    "UserRepository",
]
