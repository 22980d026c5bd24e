"""Lambda entrypoint for GET /users/check-auth."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.check_auth import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the session check handler."""
    return _handler(dict(event), context)
