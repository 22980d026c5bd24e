"""POST /users/logout."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.dependencies import get_identity_provider
from accounts.auth.session import cleared_session_cookies
from accounts.auth.session import get_session_token
from accounts.config import get_cookie_settings
from accounts.exceptions import SessionError
from accounts.services.cognito import IdentityProviderError
from accounts.utils.logging import configure_logging
from accounts.utils.logging import get_logger
from accounts.utils.responses import error_response
from accounts.utils.responses import json_response

configure_logging()
logger = get_logger(__name__)


def _logout(event: Mapping[str, Any]) -> dict[str, Any]:
    token = get_session_token(event)
    if not token:
        raise SessionError("No active session found.", code="NO_SESSION")

    cookies = cleared_session_cookies(get_cookie_settings())
    try:
        get_identity_provider().global_sign_out(token)
    except IdentityProviderError as exc:
        logger.info(
            "Sign out error (non-critical)",
            extra={"error_code": exc.error_code},
        )
    except Exception:
        logger.exception("Logout failed")
        return error_response(
            500,
            "Failed to complete logout.",
            code="LOGOUT_FAILED",
            event=event,
            cookies=cookies,
        )

    return json_response(
        200,
        {"message": "Successfully logged out. See ya later!"},
        event=event,
        cookies=cookies,
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """End the session and clear the session cookies."""
    return handle_request(event, _logout, methods=("POST",), json_body=False)
