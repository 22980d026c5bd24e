"""POST /users/login."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.common import parse_request
from accounts.api.dependencies import get_login_governor
from accounts.api.schemas import LoginRequest
from accounts.api.schemas import UserInfo
from accounts.auth.session import get_session_token
from accounts.auth.session import session_cookies
from accounts.config import get_cookie_settings
from accounts.utils.logging import configure_logging
from accounts.utils.responses import json_response

configure_logging()


def _login(event: Mapping[str, Any]) -> dict[str, Any]:
    request = parse_request(LoginRequest, event)
    result = get_login_governor().login(
        request.identifier,
        request.password,
        current_session=get_session_token(event),
    )
    user = UserInfo(username=result.account.account_id, email=result.account.email)
    return json_response(
        200,
        {"message": "Login successful.", "user": user.model_dump()},
        event=event,
        cookies=session_cookies(result.tokens, get_cookie_settings()),
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Authenticate a user and issue session cookies."""
    return handle_request(event, _login, methods=("POST",))
