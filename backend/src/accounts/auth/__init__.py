"""Login governance: identifier resolution, lockout ledger and sessions."""

from accounts.auth.governor import LoginGovernor, LoginResult, authenticate
from accounts.auth.lockout import LockoutLedger, LockState, remaining_minutes
from accounts.auth.resolver import resolve_identifier

__all__ = [
    "LockState",
    "LockoutLedger",
    "LoginGovernor",
    "LoginResult",
    "authenticate",
    "remaining_minutes",
    "resolve_identifier",
]
