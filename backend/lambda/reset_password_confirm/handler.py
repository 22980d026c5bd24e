"""Lambda entrypoint for POST /users/reset-password/confirm-new-password."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from accounts.api.password_reset import confirm_new_password_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the password reset confirmation handler."""
    return _handler(dict(event), context)
