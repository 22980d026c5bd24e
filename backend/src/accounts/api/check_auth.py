"""GET /users/check-auth.

Every response carries ``isAuthenticated`` so the client can branch on a
single field.
"""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.dependencies import get_identity_provider
from accounts.auth.session import ensure_not_expired
from accounts.auth.session import get_session_token
from accounts.auth.session import read_unverified_claims
from accounts.exceptions import NotFoundError
from accounts.exceptions import SessionError
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import configure_logging
from accounts.utils.responses import json_response

configure_logging()

_GET_USER_ERRORS = {
    "NotAuthorizedException": lambda: SessionError("Invalid/Expired session."),
    "UserNotFoundException": lambda: NotFoundError("User Not Found"),
}


def _check_auth(event: Mapping[str, Any]) -> dict[str, Any]:
    token = get_session_token(event)
    if not token:
        raise SessionError("No session found.", code="NO_SESSION")

    ensure_not_expired(read_unverified_claims(token))

    try:
        username = get_identity_provider().get_username_for_token(token)
    except IdentityProviderError as exc:
        raise map_provider_error(exc, _GET_USER_ERRORS) from exc

    return json_response(
        200,
        {"isAuthenticated": True, "userInfo": {"username": username}},
        event=event,
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Report whether the session cookie belongs to a live session."""
    return handle_request(
        event,
        _check_auth,
        methods=("GET",),
        error_extra={"isAuthenticated": False},
    )
