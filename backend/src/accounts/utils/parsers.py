"""Shared parsing utilities for API Gateway proxy events."""

from __future__ import annotations

import base64
import binascii
import json
from http.cookies import CookieError
from http.cookies import SimpleCookie
from typing import Any
from typing import Mapping
from typing import Optional

from accounts.exceptions import ValidationError


def get_header(event: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    """Return a request header value, matching the name case-insensitively.

    Args:
        event: The API Gateway event dictionary.
        name: Header name in any case.

    Returns:
        The header value, or None if absent.
    """
    if not event:
        return None
    wanted = name.lower()
    for key, value in (event.get("headers") or {}).items():
        if key.lower() == wanted and value is not None:
            return str(value)
    for key, values in (event.get("multiValueHeaders") or {}).items():
        if key.lower() == wanted and values:
            return str(values[0])
    return None


def collect_query_params(event: Mapping[str, Any]) -> dict[str, list[str]]:
    """Collect query parameters from API Gateway events.

    Multi-value parameters win when present, since API Gateway mirrors the
    last value of each key into ``queryStringParameters``.
    """
    params: dict[str, list[str]] = {}
    multi = event.get("multiValueQueryStringParameters") or {}
    for key, values in multi.items():
        kept = [value for value in values or [] if value is not None]
        if kept:
            params[key] = kept

    single = event.get("queryStringParameters") or {}
    for key, value in single.items():
        if value is not None and key not in params:
            params[key] = [value]
    return params


def first_param(params: dict[str, list[str]], key: str) -> Optional[str]:
    """Return the first query parameter value for a key."""
    values = params.get(key, [])
    return values[0] if values else None


def parse_json_body(event: Mapping[str, Any]) -> dict[str, Any]:
    """Parse the JSON request body.

    An absent body parses as an empty object so field-level validation can
    report exactly which fields are missing.

    Raises:
        ValidationError: If the body is not valid JSON or not an object.
    """
    raw = event.get("body") or ""
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw) if raw else {}
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("Request body must be valid JSON.") from exc

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")
    return body


def parse_cookies(event: Mapping[str, Any]) -> dict[str, str]:
    """Parse the ``Cookie`` request header into a name/value mapping.

    Malformed cookie headers are treated as carrying no cookies.
    """
    cookies: dict[str, str] = {}
    raw_headers: list[str] = []
    for key, value in (event.get("headers") or {}).items():
        if key.lower() == "cookie" and value:
            raw_headers.append(str(value))
    for key, values in (event.get("multiValueHeaders") or {}).items():
        if key.lower() == "cookie" and values:
            raw_headers.extend(str(value) for value in values if value)

    for raw in raw_headers:
        jar: SimpleCookie = SimpleCookie()
        try:
            jar.load(raw)
        except CookieError:
            continue
        for name, morsel in jar.items():
            cookies.setdefault(name, morsel.value)
    return cookies
