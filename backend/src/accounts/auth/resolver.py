"""Resolve a login identifier (username or email) to a Cognito account."""

from __future__ import annotations

from typing import Optional

from accounts.services.cognito import Account
from accounts.services.cognito import CognitoIdentityProvider


def is_email(identifier: str) -> bool:
    return "@" in identifier


def resolve_identifier(
    provider: CognitoIdentityProvider,
    identifier: str,
) -> Optional[Account]:
    """Find the account an identifier refers to.

    Emails are matched against the email attribute only; anything else is
    treated as a username. There is no fallback between the two.

    Args:
        provider: Identity provider client.
        identifier: Trimmed, lower-cased username or email.

    Returns:
        The account, or None when nothing matches.

    Raises:
        IdentityProviderError: If the lookup itself fails.
    """
    if is_email(identifier):
        return provider.find_account_by_email(identifier)
    return provider.get_account(identifier)
