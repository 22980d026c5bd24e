"""Database URL resolution for the Lambda runtime."""

from __future__ import annotations

import os
from urllib.parse import quote_plus

from accounts.exceptions import ConfigurationError
from accounts.services.secrets import get_secret_json


def get_database_url() -> str:
    """Resolve the database URL from env or Secrets Manager.

    DATABASE_URL wins when set. Otherwise the RDS-style JSON secret named by
    DATABASE_SECRET_ARN supplies credentials, with DATABASE_HOST,
    DATABASE_PORT, DATABASE_NAME and DATABASE_USERNAME as overrides.

    Raises:
        ConfigurationError: If neither source is configured or the secret
            lacks connection fields.
    """
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    secret_arn = os.getenv("DATABASE_SECRET_ARN")
    if not secret_arn:
        raise ConfigurationError("DATABASE_URL or DATABASE_SECRET_ARN")

    secret = get_secret_json(secret_arn)
    username = (
        os.getenv("DATABASE_USERNAME") or secret.get("username") or secret.get("user")
    )
    password = secret.get("password")
    host = os.getenv("DATABASE_HOST") or secret.get("host")
    port = os.getenv("DATABASE_PORT") or secret.get("port") or 5432
    database = (
        os.getenv("DATABASE_NAME")
        or secret.get("dbname")
        or secret.get("database")
        or "pixele"
    )

    if not username or not host or not password:
        raise ConfigurationError("DATABASE_SECRET_ARN connection fields")

    return (
        "postgresql+psycopg://"
        f"{quote_plus(str(username))}:{quote_plus(str(password))}"
        f"@{host}:{port}/{database}"
    )
