"""Lambda entrypoint for POST /users/logout."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.logout import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the logout handler."""
    return _handler(dict(event), context)
