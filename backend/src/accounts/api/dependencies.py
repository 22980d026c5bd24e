"""Per-container collaborators shared by the endpoint handlers.

Each accessor builds its object on first use and then reuses it for every
invocation the container serves. Tests swap implementations in with
``override``.
"""

from __future__ import annotations

from typing import Any
from typing import Optional

from sqlalchemy.engine import Engine

from accounts.auth.governor import LoginGovernor
from accounts.auth.lockout import LockoutLedger
from accounts.config import get_cognito_settings
from accounts.config import get_lockout_policy
from accounts.db.engine import get_engine
from accounts.services.aws_clients import get_cognito_idp_client
from accounts.services.cognito import CognitoIdentityProvider

_INSTANCES: dict[str, Any] = {}


def get_identity_provider() -> CognitoIdentityProvider:
    provider = _INSTANCES.get("provider")
    if provider is None:
        settings = get_cognito_settings()
        provider = CognitoIdentityProvider(
            get_cognito_idp_client(settings.region),
            settings,
        )
        _INSTANCES["provider"] = provider
    return provider


def get_database_engine() -> Engine:
    engine = _INSTANCES.get("engine")
    if engine is None:
        engine = get_engine()
        _INSTANCES["engine"] = engine
    return engine


def get_lockout_ledger() -> LockoutLedger:
    ledger = _INSTANCES.get("ledger")
    if ledger is None:
        ledger = LockoutLedger(get_database_engine(), get_lockout_policy())
        _INSTANCES["ledger"] = ledger
    return ledger


def get_login_governor() -> LoginGovernor:
    return LoginGovernor(get_identity_provider(), get_lockout_ledger())


def override(
    provider: Optional[CognitoIdentityProvider] = None,
    ledger: Optional[LockoutLedger] = None,
    engine: Optional[Engine] = None,
) -> None:
    """Replace the cached collaborators (tests only)."""
    if provider is not None:
        _INSTANCES["provider"] = provider
    if ledger is not None:
        _INSTANCES["ledger"] = ledger
    if engine is not None:
        _INSTANCES["engine"] = engine


def reset() -> None:
    """Forget every cached collaborator."""
    _INSTANCES.clear()
