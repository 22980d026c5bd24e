"""Initial schema for users and the login attempt ledger."""

from __future__ import annotations

from typing import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the users and login_attempts tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "username",
            sa.Text(),
            nullable=False,
            comment="Cognito username (lower-cased)",
        ),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column(
            "confirmed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Set once the Cognito sign-up code is confirmed",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("username", name="users_username_key"),
    )

    op.create_table(
        "login_attempts",
        sa.Column(
            "account_id",
            sa.Text(),
            primary_key=True,
            comment="Cognito username of the account",
        ),
        sa.Column(
            "failed_attempts",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "last_failed_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="Time of the most recent failed attempt",
        ),
        sa.Column(
            "last_login_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="Time of the most recent successful login",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint(
            "failed_attempts >= 0",
            name="login_attempts_failed_attempts_non_negative",
        ),
    )


def downgrade() -> None:
    """Drop the users and login_attempts tables."""
    op.drop_table("login_attempts")
    op.drop_table("users")
