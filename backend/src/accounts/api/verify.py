"""POST /users/verify."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.common import parse_request
from accounts.api.dependencies import get_database_engine
from accounts.api.dependencies import get_identity_provider
from accounts.api.schemas import VerifyRequest
from accounts.db.repositories import UserRepository
from accounts.db.session import transaction
from accounts.exceptions import CodeError
from accounts.exceptions import ConflictError
from accounts.exceptions import NotFoundError
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import configure_logging
from accounts.utils.logging import get_logger
from accounts.utils.logging import mask_pii
from accounts.utils.responses import json_response

configure_logging()
logger = get_logger(__name__)

_CONFIRM_ERRORS = {
    "UserNotFoundException": lambda: NotFoundError(),
    "CodeMismatchException": lambda: CodeError(
        "Verification code is incorrect.", "INVALID_CODE"
    ),
    "NotAuthorizedException": lambda: ConflictError(
        "This account is already verified.", "ALREADY_VERIFIED"
    ),
    "ExpiredCodeException": lambda: CodeError(
        "Verification code has expired. Please request a new one.",
        "EXPIRED_CODE",
        status_code=410,
    ),
}


def _verify(event: Mapping[str, Any]) -> dict[str, Any]:
    request = parse_request(VerifyRequest, event)
    username = request.username

    try:
        get_identity_provider().confirm_sign_up(username, request.verification_code)
    except IdentityProviderError as exc:
        raise map_provider_error(exc, _CONFIRM_ERRORS) from exc

    with transaction(get_database_engine()) as session:
        if not UserRepository(session).mark_confirmed(username):
            raise NotFoundError(details={"username": username})

    logger.info("User verified", extra={"username": mask_pii(username)})
    return json_response(
        200,
        {
            "message": "Verification Successful!",
            "code": "VERIFICATION_SUCCESS",
            "details": {"username": username},
        },
        event=event,
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Confirm a sign-up with the emailed verification code."""
    return handle_request(event, _verify, methods=("POST",))
