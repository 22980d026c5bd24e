"""Login attempt ledger model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Integer, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from accounts.db.base import Base


class LoginAttempt(Base):
    """Failed-attempt counter and login timestamps for one account.

    ``failed_attempts`` and ``last_failed_at`` are always written together.
    """

    __tablename__ = "login_attempts"
    __table_args__ = (
        CheckConstraint(
            "failed_attempts >= 0",
            name="login_attempts_failed_attempts_non_negative",
        ),
    )

    account_id: Mapped[str] = mapped_column(
        Text(),
        primary_key=True,
        comment="Cognito username of the account",
    )
    failed_attempts: Mapped[int] = mapped_column(
        Integer(),
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    last_failed_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        comment="Time of the most recent failed attempt",
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        comment="Time of the most recent successful login",
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
