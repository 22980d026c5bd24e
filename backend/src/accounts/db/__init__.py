"""Database utilities and models."""

from accounts.db.base import Base
from accounts.db.models import LoginAttempt
from accounts.db.models import User

__all__ = [
    "Base",
    "LoginAttempt",
    "User",
]
