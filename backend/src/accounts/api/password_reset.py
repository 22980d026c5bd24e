"""Password reset endpoints.

- POST /users/reset-password/send-email
- POST /users/reset-password/confirm-new-password

Accounts that never confirmed their email get a new confirmation code
instead of a reset, on both steps.
"""

from __future__ import annotations

from typing import Any
from typing import Mapping
from typing import Optional

from accounts.api.common import handle_request
from accounts.api.common import parse_request
from accounts.api.dependencies import get_identity_provider
from accounts.api.schemas import PasswordResetConfirmRequest
from accounts.api.schemas import PasswordResetEmailRequest
from accounts.exceptions import CodeError
from accounts.exceptions import InvalidCredentialsError
from accounts.exceptions import NotFoundError
from accounts.exceptions import ProviderUnavailableError
from accounts.exceptions import UnconfirmedAccountError
from accounts.exceptions import ValidationError
from accounts.services.cognito import Account
from accounts.services.cognito import CognitoIdentityProvider
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import configure_logging
from accounts.utils.logging import get_logger
from accounts.utils.logging import hash_for_correlation
from accounts.utils.responses import json_response
from accounts.utils.validators import validate_password

configure_logging()
logger = get_logger(__name__)

_RESEND_ERRORS = {
    "CodeDeliveryFailureException": lambda: ProviderUnavailableError(
        "Failed to resend verification code."
    ),
}

_FORGOT_PASSWORD_ERRORS = {
    "UserNotFoundException": lambda: NotFoundError(
        "No account found with this email address."
    ),
    "InvalidParameterException": lambda: ValidationError(
        "Invalid email format.", code="INVALID_EMAIL"
    ),
}

_CONFIRM_PASSWORD_ERRORS = {
    "UserNotFoundException": lambda: InvalidCredentialsError("Invalid credentials."),
    "CodeMismatchException": lambda: CodeError(
        "Invalid confirmation code.", "INVALID_CODE"
    ),
    "ExpiredCodeException": lambda: CodeError(
        "Confirmation code has expired.", "EXPIRED_CODE"
    ),
    "InvalidPasswordException": lambda: ValidationError(
        "Password requirements not met.", code="INVALID_PASSWORD"
    ),
}


def require_confirmed(provider: CognitoIdentityProvider, account: Account) -> None:
    """Resend the sign-up code and refuse the request if unconfirmed.

    Raises:
        UnconfirmedAccountError: After the code has been resent.
        RateLimitError: If the resend is throttled.
        ProviderUnavailableError: If the resend fails otherwise.
    """
    if account.confirmed:
        return
    try:
        provider.resend_confirmation_code(account.account_id)
    except IdentityProviderError as exc:
        raise map_provider_error(exc, _RESEND_ERRORS) from exc
    raise UnconfirmedAccountError(account.account_id, account.email)


def _find_account(
    provider: CognitoIdentityProvider,
    identifier: str,
) -> Optional[Account]:
    account = provider.find_account_by_username(identifier)
    if account is None:
        account = provider.find_account_by_email(identifier)
    return account


def _send_email(event: Mapping[str, Any]) -> dict[str, Any]:
    request = parse_request(PasswordResetEmailRequest, event)
    provider = get_identity_provider()

    try:
        account = _find_account(provider, request.identifier)
        if account is None:
            raise NotFoundError("No account found with this identifier.")
        require_confirmed(provider, account)
        provider.forgot_password(account.account_id)
    except IdentityProviderError as exc:
        raise map_provider_error(exc, _FORGOT_PASSWORD_ERRORS) from exc

    logger.info(
        "Password reset code sent",
        extra={"account": hash_for_correlation(account.account_id)},
    )
    return json_response(
        200,
        {
            "message": "Password reset email sent successfully.",
            "code": "EMAIL_SEND_SUCCESS",
        },
        event=event,
    )


def _confirm_new_password(event: Mapping[str, Any]) -> dict[str, Any]:
    request = parse_request(PasswordResetConfirmRequest, event)
    validate_password(request.new_password)
    provider = get_identity_provider()

    try:
        account = provider.get_account(request.username)
        if account is None:
            raise InvalidCredentialsError("Invalid credentials.")
        require_confirmed(provider, account)
        provider.confirm_forgot_password(
            account.account_id,
            request.confirmation_code,
            request.new_password,
        )
    except IdentityProviderError as exc:
        raise map_provider_error(exc, _CONFIRM_PASSWORD_ERRORS) from exc

    logger.info(
        "Password reset completed",
        extra={"account": hash_for_correlation(account.account_id)},
    )
    return json_response(
        200,
        {"message": "Successfully reset password.", "code": "PASSWORD_RESET_SUCCESS"},
        event=event,
    )


def send_email_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Email a password reset code."""
    return handle_request(event, _send_email, methods=("POST",))


def confirm_new_password_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Set a new password using the emailed reset code."""
    return handle_request(event, _confirm_new_password, methods=("POST",))
