"""GET /users/check-username-availability?username=..."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.common import handle_request
from accounts.api.dependencies import get_identity_provider
from accounts.exceptions import ValidationError
from accounts.services.cognito import IdentityProviderError
from accounts.services.cognito import map_provider_error
from accounts.utils.logging import configure_logging
from accounts.utils.parsers import collect_query_params
from accounts.utils.parsers import first_param
from accounts.utils.responses import json_response

configure_logging()


def _check_availability(event: Mapping[str, Any]) -> dict[str, Any]:
    username = (first_param(collect_query_params(event), "username") or "").strip()
    if not username:
        raise ValidationError(
            "Missing required fields.",
            code="MISSING_FIELDS",
            details={"missingFields": ["username"]},
        )

    try:
        account = get_identity_provider().find_account_by_username(username.lower())
    except IdentityProviderError as exc:
        raise map_provider_error(exc) from exc

    return json_response(200, {"taken": account is not None}, event=event)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Report whether a username is already registered."""
    return handle_request(event, _check_availability, methods=("GET",))
