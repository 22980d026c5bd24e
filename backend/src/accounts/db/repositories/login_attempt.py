"""Repository for the login attempt ledger.

Rows are read with ``SELECT ... FOR UPDATE`` so concurrent logins for the
same account serialize on the row instead of overwriting each other's
counter. On SQLite (tests) the lock clause is omitted by SQLAlchemy.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from accounts.db.models import LoginAttempt
from accounts.db.repositories.base import BaseRepository

_INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class LoginAttemptRepository(BaseRepository[LoginAttempt]):
    """Data access for the ``login_attempts`` table."""

    def __init__(self, session: Session):
        super().__init__(session, LoginAttempt)

    def get_for_update(self, account_id: str) -> Optional[LoginAttempt]:
        """Load the account's row, locking it until the transaction ends."""
        query = (
            select(LoginAttempt)
            .where(LoginAttempt.account_id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.execute(query).scalar_one_or_none()

    def get_or_create_for_update(self, account_id: str) -> LoginAttempt:
        """Ensure the account's row exists, then load it locked.

        The insert is ``ON CONFLICT DO NOTHING`` so two first-time attempts
        for the same account cannot fail on the primary key.
        """
        dialect = self._session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise RuntimeError(f"Unsupported database dialect: {dialect}")

        self._session.execute(
            insert(LoginAttempt)
            .values(account_id=account_id, failed_attempts=0)
            .on_conflict_do_nothing(index_elements=[LoginAttempt.account_id])
        )
        record = self.get_for_update(account_id)
        if record is None:
            raise RuntimeError(f"login_attempts row missing after insert: {account_id}")
        return record
