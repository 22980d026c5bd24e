"""POST /users/register.

Creates the local ``users`` row and the Cognito user together. The row is
inserted first inside a transaction, and that transaction only commits if
Cognito ``SignUp`` succeeds.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.common import parse_request
from accounts.api.dependencies import get_database_engine
from accounts.api.dependencies import get_identity_provider
from accounts.api.schemas import RegisterRequest
from accounts.db.repositories import UserRepository
from accounts.db.session import transaction
from accounts.exceptions import ConflictError
from accounts.exceptions import ValidationError
from accounts.services.cognito import CognitoIdentityProvider
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import configure_logging
from accounts.utils.logging import get_logger
from accounts.utils.logging import mask_email
from accounts.utils.logging import mask_pii
from accounts.utils.responses import json_response
from accounts.utils.validators import validate_clean_username
from accounts.utils.validators import validate_email
from accounts.utils.validators import validate_password
from accounts.utils.validators import validate_username

configure_logging()
logger = get_logger(__name__)

_SIGN_UP_ERRORS = {
    "UsernameExistsException": lambda: ConflictError(
        "Username already in use.", "USERNAME_EXISTS"
    ),
    "InvalidPasswordException": lambda: ValidationError(
        "Password requirements not met.", code="INVALID_PASSWORD"
    ),
    "InvalidParameterException": lambda: ValidationError("Invalid input."),
}


def check_duplicates(
    provider: CognitoIdentityProvider,
    username: str,
    email: str,
) -> None:
    """Reject registrations whose email or username is already taken.

    Both lookups run concurrently.

    Raises:
        ConflictError: DUPLICATE_CREDENTIALS, EMAIL_EXISTS or USERNAME_EXISTS.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        email_future = executor.submit(provider.find_account_by_email, email)
        username_future = executor.submit(provider.find_account_by_username, username)
        email_exists = email_future.result() is not None
        username_exists = username_future.result() is not None

    if email_exists and username_exists:
        raise ConflictError(
            "Both Email and Username are already in use.",
            "DUPLICATE_CREDENTIALS",
        )
    if email_exists:
        raise ConflictError("Email already in use.", "EMAIL_EXISTS")
    if username_exists:
        raise ConflictError("Username already in use.", "USERNAME_EXISTS")


def _register(event: Mapping[str, Any]) -> dict[str, Any]:
    request = parse_request(RegisterRequest, event)
    validate_email(request.email)
    validate_username(request.username)
    validate_password(request.password)
    validate_clean_username(request.username)

    provider = get_identity_provider()
    try:
        check_duplicates(provider, request.username, request.email)
        with transaction(get_database_engine()) as session:
            UserRepository(session).create_user(request.username, request.email)
            provider.sign_up(request.username, request.password, request.email)
    except IdentityProviderError as exc:
        raise map_provider_error(exc, _SIGN_UP_ERRORS) from exc

    logger.info(
        "User registered",
        extra={
            "username": mask_pii(request.username),
            "email": mask_email(request.email),
        },
    )
    return json_response(
        201,
        {"message": "Registration Successful!", "code": "REGISTRATION_SUCCESS"},
        event=event,
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Register a new account."""
    return handle_request(event, _register, methods=("POST",))
