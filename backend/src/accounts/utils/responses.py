"""Shared response utilities for Lambda handlers."""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Sequence

from pydantic import BaseModel

from accounts.exceptions import ValidationError
from accounts.utils.parsers import get_header

_DEFAULT_CORS_ORIGINS = ["https://pixele.gg"]


def validate_content_type(
    event: Mapping[str, Any],
    required_methods: tuple[str, ...] = ("POST", "PUT", "PATCH"),
) -> None:
    """Validate the Content-Type header for requests that carry a body.

    Raises:
        ValidationError: If Content-Type is missing or not application/json.
    """
    method = event.get("httpMethod", "")
    if method not in required_methods:
        return

    content_type = (get_header(event, "content-type") or "").lower().strip()
    if not content_type:
        raise ValidationError(
            "Content-Type header is required for requests with a body",
            details={"invalidFields": ["Content-Type"]},
        )
    # Allow charset parameters like "application/json; charset=utf-8"
    if not content_type.startswith("application/json"):
        raise ValidationError(
            "Content-Type must be application/json",
            details={"invalidFields": ["Content-Type"]},
        )


def get_security_headers() -> dict[str, str]:
    """Headers attached to every response."""
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Cache-Control": "no-store, no-cache, must-revalidate",
        "Pragma": "no-cache",
    }


def _allowed_origins() -> list[str]:
    configured = os.getenv("CORS_ALLOWED_ORIGINS", "")
    origins = [origin.strip() for origin in configured.split(",") if origin.strip()]
    return origins or _DEFAULT_CORS_ORIGINS


def get_cors_headers(
    event: Optional[Mapping[str, Any]] = None,
    methods: Sequence[str] = ("GET", "POST", "OPTIONS"),
) -> dict[str, str]:
    """Get CORS headers for a credentialed (cookie) request.

    Credentialed responses cannot use ``*``, so the request origin is echoed
    when allowed and the first configured origin is returned otherwise.
    """
    allowed_origins = _allowed_origins()
    request_origin = get_header(event, "origin") if event else None
    if request_origin and request_origin in allowed_origins:
        allow_origin = request_origin
    else:
        allow_origin = allowed_origins[0]

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": ", ".join(methods),
        "Vary": "Origin",
    }


def json_response(
    status_code: int,
    body: Any,
    headers: Optional[dict[str, str]] = None,
    event: Optional[Mapping[str, Any]] = None,
    cookies: Optional[Sequence[str]] = None,
) -> dict[str, Any]:
    """Create a JSON API Gateway proxy response.

    Args:
        status_code: HTTP status code.
        body: Response body (dict, Pydantic model, or dataclass).
        headers: Optional additional headers to include.
        event: Optional Lambda event for CORS origin detection.
        cookies: Serialized ``Set-Cookie`` values.

    Returns:
        API Gateway response dictionary.
    """
    response_headers = {"Content-Type": "application/json"}
    response_headers.update(get_security_headers())
    response_headers.update(get_cors_headers(event))
    if headers:
        response_headers.update(headers)

    response: dict[str, Any] = {
        "statusCode": status_code,
        "headers": response_headers,
        "body": json.dumps(_serialize_body(body), default=str),
    }
    # API Gateway only emits repeated headers through multiValueHeaders.
    if cookies:
        response["multiValueHeaders"] = {"Set-Cookie": list(cookies)}
    return response


def _serialize_body(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(by_alias=True)
    if hasattr(body, "__dataclass_fields__"):
        return asdict(body)
    return body


def error_response(
    status_code: int,
    message: str,
    code: str = "SERVER_ERROR",
    event: Optional[Mapping[str, Any]] = None,
    cookies: Optional[Sequence[str]] = None,
) -> dict[str, Any]:
    """Create an error response with the standard ``message``/``code`` body."""
    return json_response(
        status_code,
        {"message": message, "code": code},
        event=event,
        cookies=cookies,
    )


def preflight_response(
    event: Mapping[str, Any],
    methods: Sequence[str],
) -> dict[str, Any]:
    """Answer a CORS preflight request."""
    headers = get_security_headers()
    headers.update(get_cors_headers(event, methods=methods))
    return {"statusCode": 200, "headers": headers, "body": ""}
