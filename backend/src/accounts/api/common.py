"""Request pipeline shared by every account endpoint.

``handle_request`` wraps an endpoint callable with the steps every Lambda
performs: request-id binding, CORS preflight, method and Content-Type
checks, error mapping and response logging.
"""

from __future__ import annotations

import time
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional
from typing import Sequence
from typing import Type
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from accounts.exceptions import AppError
from accounts.exceptions import ValidationError
from accounts.utils.logging import clear_request_context
from accounts.utils.logging import get_logger
from accounts.utils.logging import log_response
from accounts.utils.logging import set_request_context
from accounts.utils.parsers import parse_json_body
from accounts.utils.responses import json_response
from accounts.utils.responses import preflight_response
from accounts.utils.responses import validate_content_type

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

Handler = Callable[[Mapping[str, Any]], dict[str, Any]]

_MISSING_ERROR_TYPES = frozenset({"missing", "string_too_short"})


def handle_request(
    event: Mapping[str, Any],
    handler: Handler,
    methods: Sequence[str] = ("POST",),
    error_extra: Optional[dict[str, Any]] = None,
    json_body: bool = True,
) -> dict[str, Any]:
    """Run an endpoint handler with the common request pipeline.

    Args:
        event: API Gateway proxy event.
        handler: Endpoint logic; receives the event, returns a response.
        methods: HTTP methods the endpoint accepts (OPTIONS is implicit).
        error_extra: Fields merged into every error body of this endpoint.
        json_body: Whether the request must declare a JSON Content-Type.

    Returns:
        API Gateway proxy response.
    """
    start_time = time.perf_counter()
    request_id = (event.get("requestContext") or {}).get("requestId", "")
    set_request_context(req_id=request_id)
    try:
        response = _dispatch(event, handler, methods, error_extra, json_body)
        duration_ms = (time.perf_counter() - start_time) * 1000
        log_response(logger, response["statusCode"], duration_ms)
        return response
    finally:
        clear_request_context()


def _dispatch(
    event: Mapping[str, Any],
    handler: Handler,
    methods: Sequence[str],
    error_extra: Optional[dict[str, Any]],
    json_body: bool,
) -> dict[str, Any]:
    method = event.get("httpMethod", "")
    if method == "OPTIONS":
        return preflight_response(event, [*methods, "OPTIONS"])

    if method not in methods:
        return json_response(
            405,
            {"message": "Method not allowed", "code": "METHOD_NOT_ALLOWED"},
            event=event,
        )

    logger.info(f"Request: {method} {event.get('path', '')}")

    def run() -> dict[str, Any]:
        if json_body:
            validate_content_type(event)
        return handler(event)

    return _safe(run, event, error_extra)


def _safe(
    handler: Callable[[], dict[str, Any]],
    event: Mapping[str, Any],
    error_extra: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Execute a handler with common error handling.

    Args:
        handler: The handler function to execute.
        event: The Lambda event for response formatting.
        error_extra: Fields merged into error bodies.

    Returns:
        API Gateway response.
    """
    try:
        return handler()
    except AppError as exc:
        if exc.status_code >= 500:
            logger.error(f"Request failed: {exc}", extra={"code": exc.code})
        else:
            logger.warning(f"Request rejected: {exc.message}", extra={"code": exc.code})
        body = exc.to_dict()
        body.update(error_extra or {})
        return json_response(exc.status_code, body, event=event)
    except Exception:
        logger.exception("Unexpected error in handler")
        body = {"message": "Internal Server Error", "code": "SERVER_ERROR"}
        body.update(error_extra or {})
        return json_response(500, body, event=event)


def parse_request(model: Type[M], event: Mapping[str, Any]) -> M:
    """Parse and validate the JSON body of ``event`` into ``model``.

    Null and empty values count as missing.

    Raises:
        ValidationError: MISSING_FIELDS listing absent fields, or
            INVALID_INPUT listing fields of the wrong type.
    """
    body = {key: value for key, value in parse_json_body(event).items() if value is not None}
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        missing: list[str] = []
        invalid: list[str] = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            if error["type"] in _MISSING_ERROR_TYPES:
                missing.append(field)
            else:
                invalid.append(field)
        if missing:
            raise ValidationError(
                "Missing required fields.",
                code="MISSING_FIELDS",
                details={"missingFields": missing},
            ) from exc
        raise ValidationError(
            "Invalid input.",
            details={"invalidFields": invalid},
        ) from exc
