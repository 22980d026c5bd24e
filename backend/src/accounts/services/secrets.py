"""Secrets Manager helpers with caching."""

from __future__ import annotations

import base64
import json
from typing import Any

from accounts.services.aws_clients import get_secretsmanager_client

_SECRET_CACHE: dict[str, dict[str, Any]] = {}


def get_secret_json(secret_id: str) -> dict[str, Any]:
    """Fetch a JSON secret from AWS Secrets Manager.

    Args:
        secret_id: Secret ARN or name.

    Returns:
        The parsed secret payload.

    Raises:
        RuntimeError: If the secret is empty or not a JSON object.
    """
    if secret_id in _SECRET_CACHE:
        return _SECRET_CACHE[secret_id]

    client = get_secretsmanager_client()
    response = client.get_secret_value(SecretId=secret_id)
    secret_str = response.get("SecretString")
    if not secret_str and response.get("SecretBinary"):
        secret_str = base64.b64decode(response["SecretBinary"]).decode("utf-8")
    if not secret_str:
        raise RuntimeError("Secret value is empty")

    secret_payload = json.loads(secret_str)
    if not isinstance(secret_payload, dict):
        raise RuntimeError("Secret value must be a JSON object")
    _SECRET_CACHE[secret_id] = secret_payload
    return secret_payload


def clear_secret_cache() -> None:
    """Clear cached secrets (useful in tests)."""
    _SECRET_CACHE.clear()
