"""SQLAlchemy models for account data."""

from accounts.db.models.login_attempt import LoginAttempt
from accounts.db.models.user import User

__all__ = [
    "LoginAttempt",
    "User",
]
