"""User model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Integer, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from accounts.db.base import Base


class User(Base):
    """Local profile row for a Cognito account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer(), primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        Text(),
        nullable=False,
        unique=True,
        comment="Cognito username (lower-cased)",
    )
    email: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    confirmed: Mapped[bool] = mapped_column(
        Boolean(),
        nullable=False,
        default=False,
        server_default=false(),
        comment="Set once the Cognito sign-up code is confirmed",
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
