"""Lambda entrypoint for GET /users/check-username-availability."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.username_availability import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the username availability handler."""
    return _handler(dict(event), context)
