"""Shared boto3 client factory with caching.

Clients are created once per Lambda container and reused across
invocations.
"""

from __future__ import annotations

from typing import Any
from typing import Optional

import boto3
import botocore.config

_CLIENT_CACHE: dict[tuple[str, Optional[str]], Any] = {}

# Single attempt per call: Cognito sits on the login path.
_COGNITO_CONFIG = botocore.config.Config(
    connect_timeout=5,
    read_timeout=10,
    retries={"total_max_attempts": 1, "mode": "standard"},
)


def get_client(
    service: str,
    region_name: Optional[str] = None,
    config: Optional[botocore.config.Config] = None,
) -> Any:
    """Return a cached boto3 client for the given service."""
    cache_key = (service, region_name)
    if cache_key in _CLIENT_CACHE:
        return _CLIENT_CACHE[cache_key]
    client = boto3.client(  # type: ignore[call-overload]
        service,
        region_name=region_name,
        config=config,
    )
    _CLIENT_CACHE[cache_key] = client
    return client


def get_secretsmanager_client(region_name: Optional[str] = None) -> Any:
    return get_client("secretsmanager", region_name=region_name)


def get_cognito_idp_client(region_name: Optional[str] = None) -> Any:
    return get_client("cognito-idp", region_name=region_name, config=_COGNITO_CONFIG)
