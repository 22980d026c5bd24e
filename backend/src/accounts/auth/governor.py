"""Login flow: identifier resolution, lockout, password check, ledger update.

State flow for one request::

    resolve -> check lock -> authenticate -> record success | record failure

- Unknown identifiers fail exactly like a wrong password (401).
- A locked account is refused before Cognito is called (403).
- Unconfirmed accounts, provider throttling and auth challenges never touch
  the ledger.
- A wrong password or a provider failure during the password check
  increments the counter; reaching the threshold locks.
- Every ledger transaction is finished before the outcome is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from accounts.auth.lockout import LockoutLedger
from accounts.auth.lockout import remaining_minutes
from accounts.auth.resolver import resolve_identifier
from accounts.exceptions import AccountLockedError
from accounts.exceptions import AuthIncompleteError
from accounts.exceptions import DatabaseError
from accounts.exceptions import InvalidCredentialsError
from accounts.exceptions import ProviderUnavailableError
from accounts.exceptions import UnconfirmedAccountError
from accounts.services.cognito import Account
from accounts.services.cognito import CognitoIdentityProvider
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import TokenSet
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import get_logger
from accounts.utils.logging import hash_for_correlation
from accounts.utils.logging import mask_identifier

logger = get_logger(__name__)

_INVALID_CREDENTIAL_CODES = frozenset({"NotAuthorizedException", "UserNotFoundException"})


@dataclass(frozen=True)
class LoginResult:
    """A completed sign-in."""

    account: Account
    tokens: TokenSet


def authenticate(
    provider: CognitoIdentityProvider,
    account: Account,
    password: str,
) -> TokenSet:
    """Check the password with Cognito and classify the outcome.

    Raises:
        InvalidCredentialsError: Wrong password or unknown user.
        UnconfirmedAccountError: Sign-up not confirmed; a new code has been
            requested best-effort.
        AuthIncompleteError: Cognito answered with a further challenge.
        RateLimitError: Cognito throttled the request.
        ProviderUnavailableError: Any other provider failure.
    """
    try:
        outcome = provider.initiate_password_auth(account.account_id, password)
    except IdentityProviderError as exc:
        if exc.error_code in _INVALID_CREDENTIAL_CODES:
            raise InvalidCredentialsError() from exc
        if exc.error_code == "UserNotConfirmedException":
            _resend_confirmation_code(provider, account)
            raise UnconfirmedAccountError(account.account_id, account.email) from exc
        raise map_provider_error(exc) from exc

    if outcome.tokens is None:
        raise AuthIncompleteError(
            account.account_id,
            account.email,
            outcome.challenge or "UNKNOWN",
        )
    return outcome.tokens


def _resend_confirmation_code(
    provider: CognitoIdentityProvider,
    account: Account,
) -> None:
    try:
        provider.resend_confirmation_code(account.account_id)
    except IdentityProviderError as exc:
        logger.warning(
            "Failed to resend confirmation code",
            extra={
                "account": hash_for_correlation(account.account_id),
                "error_code": exc.error_code,
            },
        )


class LoginGovernor:
    """Runs one login attempt against the provider and the ledger."""

    def __init__(self, provider: CognitoIdentityProvider, ledger: LockoutLedger):
        self._provider = provider
        self._ledger = ledger

    def login(
        self,
        identifier: str,
        password: str,
        current_session: Optional[str] = None,
    ) -> LoginResult:
        """Authenticate ``identifier``/``password``.

        Args:
            identifier: Trimmed, lower-cased username or email.
            password: The password as typed.
            current_session: Access token from an existing session cookie;
                it is signed out before the new sign-in.

        Returns:
            The account and its freshly issued tokens.

        Raises:
            AppError: One of the mapped outcomes described in the module
                docstring.
        """
        if current_session:
            self.reset_session(current_session)

        try:
            account = resolve_identifier(self._provider, identifier)
        except IdentityProviderError as exc:
            raise map_provider_error(exc) from exc
        if account is None:
            logger.info(
                "Login for unknown identifier",
                extra={"identifier": mask_identifier(identifier)},
            )
            raise InvalidCredentialsError()

        account_ref = hash_for_correlation(account.account_id)
        state = self._ledger.get_lock_state(account.account_id)
        if state.locked and state.unlock_at is not None:
            minutes = remaining_minutes(state.unlock_at, self._ledger.now())
            logger.warning(
                "Login refused for locked account",
                extra={"account": account_ref, "remaining_minutes": minutes},
            )
            raise AccountLockedError(minutes)

        try:
            tokens = authenticate(self._provider, account, password)
        except (InvalidCredentialsError, ProviderUnavailableError):
            self._record_failure(account.account_id, account_ref)
            raise

        try:
            self._ledger.record_success(account.account_id)
        except DatabaseError:
            self.reset_session(tokens.access_token)
            raise

        logger.info("Login succeeded", extra={"account": account_ref})
        return LoginResult(account=account, tokens=tokens)

    def _record_failure(self, account_id: str, account_ref: str) -> None:
        """Count a failed attempt and raise AccountLockedError at the threshold."""
        failed_attempts = self._ledger.record_failure(account_id)
        if failed_attempts < self._ledger.policy.threshold:
            return
        logger.warning(
            "Account locked after repeated failures",
            extra={"account": account_ref, "failed_attempts": failed_attempts},
        )
        now = self._ledger.now()
        raise AccountLockedError(remaining_minutes(now + self._ledger.policy.duration, now))

    def reset_session(self, access_token: str) -> None:
        """Sign out a session, logging and ignoring any failure."""
        try:
            self._provider.global_sign_out(access_token)
        except IdentityProviderError as exc:
            logger.info(
                "Session reset failed (non-critical)",
                extra={"error_code": exc.error_code},
            )
