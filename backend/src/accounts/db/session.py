"""Scoped transactions over the pooled engine."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from accounts.exceptions import DatabaseError
from accounts.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def transaction(engine: Engine) -> Iterator[Session]:
    """Run the block in one transaction on one pooled connection.

    Commits when the block exits normally and rolls back on any exception.
    The connection goes back to the pool on every exit path.

    Raises:
        DatabaseError: If SQLAlchemy fails; the transaction is already
            rolled back when this propagates.
    """
    try:
        with Session(engine, expire_on_commit=False) as session, session.begin():
            yield session
    except SQLAlchemyError as exc:
        logger.error(
            "Database transaction rolled back",
            extra={"error": type(exc).__name__},
            exc_info=True,
        )
        raise DatabaseError() from exc
