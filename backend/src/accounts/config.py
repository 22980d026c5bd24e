"""Runtime configuration resolved from the Lambda environment.

Cognito identifiers come either from plain environment variables or from
the JSON secret named by AUTH_SECRET_ARN. Values are resolved once per
container.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from accounts.exceptions import ConfigurationError
from accounts.services.secrets import get_secret_json

DEFAULT_LOCK_THRESHOLD = 5
DEFAULT_LOCKOUT_MINUTES = 15
DEFAULT_REFRESH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60

SESSION_COOKIE = "pixele_session"
ID_COOKIE = "pixele_id"
REFRESH_COOKIE = "pixele_refresh"


@dataclass(frozen=True)
class CognitoSettings:
    """Identifiers of the Cognito user pool and its app client."""

    user_pool_id: str
    client_id: str
    client_secret: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class LockoutPolicy:
    """Failed-login threshold and the length of the lockout window."""

    threshold: int = DEFAULT_LOCK_THRESHOLD
    duration: timedelta = timedelta(minutes=DEFAULT_LOCKOUT_MINUTES)


@dataclass(frozen=True)
class CookieSettings:
    """Attributes shared by every session cookie."""

    domain: Optional[str] = None
    secure: bool = True
    refresh_max_age: int = DEFAULT_REFRESH_TOKEN_MAX_AGE


@lru_cache(maxsize=1)
def get_cognito_settings() -> CognitoSettings:
    """Resolve Cognito identifiers from env or Secrets Manager.

    Raises:
        ConfigurationError: If the user pool or client id cannot be found.
    """
    user_pool_id = os.getenv("COGNITO_USER_POOL_ID")
    client_id = os.getenv("COGNITO_CLIENT_ID")
    client_secret = os.getenv("COGNITO_CLIENT_SECRET")

    secret_arn = os.getenv("AUTH_SECRET_ARN")
    if secret_arn and not (user_pool_id and client_id):
        secret = get_secret_json(secret_arn)
        user_pool_id = user_pool_id or secret.get("USER_POOL_ID")
        client_id = client_id or secret.get("USER_POOL_CLIENT_ID")
        client_secret = client_secret or secret.get("USER_POOL_CLIENT_SECRET")

    if not user_pool_id:
        raise ConfigurationError("COGNITO_USER_POOL_ID")
    if not client_id:
        raise ConfigurationError("COGNITO_CLIENT_ID")

    return CognitoSettings(
        user_pool_id=user_pool_id,
        client_id=client_id,
        client_secret=client_secret or None,
        region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
    )


def get_lockout_policy() -> LockoutPolicy:
    """Return the lockout policy, honouring env overrides."""
    threshold = _positive_int("LOGIN_LOCK_THRESHOLD", DEFAULT_LOCK_THRESHOLD)
    minutes = _positive_int("LOGIN_LOCKOUT_MINUTES", DEFAULT_LOCKOUT_MINUTES)
    return LockoutPolicy(threshold=threshold, duration=timedelta(minutes=minutes))


def get_cookie_settings() -> CookieSettings:
    """Return session cookie attributes."""
    secure = os.getenv("COOKIE_SECURE", "true").lower() not in {"0", "false", "no"}
    return CookieSettings(
        domain=os.getenv("COOKIE_DOMAIN") or None,
        secure=secure,
        refresh_max_age=_positive_int(
            "REFRESH_TOKEN_MAX_AGE", DEFAULT_REFRESH_TOKEN_MAX_AGE
        ),
    )


def clear_settings_cache() -> None:
    """Forget resolved Cognito settings (useful in tests)."""
    get_cognito_settings.cache_clear()


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(name) from exc
    if value < 1:
        raise ConfigurationError(name)
    return value
