"""POST /users/resend-verification-code."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.common import parse_request
from accounts.api.dependencies import get_identity_provider
from accounts.api.schemas import ResendVerificationRequest
from accounts.exceptions import ConflictError
from accounts.exceptions import NotFoundError
from accounts.exceptions import ProviderUnavailableError
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import configure_logging
from accounts.utils.responses import json_response

configure_logging()


def _resend(event: Mapping[str, Any]) -> dict[str, Any]:
    request = parse_request(ResendVerificationRequest, event)
    provider = get_identity_provider()

    try:
        account = provider.get_account(request.username)
        if account is None:
            raise NotFoundError()
        if account.confirmed:
            raise ConflictError("This account is already verified.", "ALREADY_VERIFIED")
        provider.resend_confirmation_code(account.account_id)
    except IdentityProviderError as exc:
        raise map_provider_error(
            exc,
            {
                "UserNotFoundException": lambda: NotFoundError(),
                "InvalidParameterException": lambda: ConflictError(
                    "This account is already verified.", "ALREADY_VERIFIED"
                ),
                "CodeDeliveryFailureException": lambda: ProviderUnavailableError(
                    "Failed to resend verification code."
                ),
            },
        ) from exc

    return json_response(
        200,
        {"message": "Successfully resent verification code.", "code": "RESEND_SUCCESS"},
        event=event,
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Send a fresh sign-up confirmation code."""
    return handle_request(event, _resend, methods=("POST",))
