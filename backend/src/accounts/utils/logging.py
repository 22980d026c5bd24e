"""Structured logging for the account Lambdas.

Log lines are single JSON objects so CloudWatch Logs Insights can filter
on request id, level and the ``extra`` payload.

SECURITY NOTES:
- Identifiers (usernames, emails) go through mask_email()/mask_pii()
- Passwords, verification codes and tokens are never logged
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import MutableMapping
from typing import Optional

_NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "sqlalchemy.engine")

request_id: ContextVar[str] = ContextVar("request_id", default="")


def mask_email(email: str) -> str:
    """Mask an email address for safe logging.

    Examples:
        >>> mask_email("john.doe@example.com")
        'jo***@***.com'
        >>> mask_email("a@b.co")
        'a***@***.co'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)
    visible_local = local[:2] if len(local) > 2 else local[:1]
    domain_parts = domain.rsplit(".", 1)
    tld = domain_parts[-1] if len(domain_parts) > 1 else ""
    return f"{visible_local}***@***.{tld}" if tld else f"{visible_local}***@***"


def mask_pii(value: str, visible_chars: int = 3) -> str:
    """Mask a username or other PII value, keeping only a short prefix."""
    if not value:
        return "***"
    if len(value) <= visible_chars:
        return value[0] + "***"
    return value[:visible_chars] + "***"


def mask_identifier(identifier: str) -> str:
    """Mask a login identifier that may be an email or a username."""
    if "@" in identifier:
        return mask_email(identifier)
    return mask_pii(identifier)


def hash_for_correlation(value: str) -> str:
    """Short stable hash used to correlate one account across log lines."""
    return hashlib.sha256(value.encode()).hexdigest()[:12]


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with request context and exception details."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        req_id = request_id.get()
        if req_id:
            log_data["request_id"] = req_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that nests keyword ``extra`` under a single key."""

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = {"extra": extra} if extra else {}
        return msg, kwargs


def configure_logging(level: Optional[str] = None) -> None:
    """Install the JSON handler on the root logger.

    Args:
        level: Log level name. Defaults to LOG_LEVEL or INFO.
    """
    log_level: str = level or os.getenv("LOG_LEVEL") or "INFO"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredLogFormatter())
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Return a ContextLogger that adds ``extra`` to every line."""
    return ContextLogger(logging.getLogger(name), extra)


def set_request_context(req_id: Optional[str] = None) -> None:
    """Bind the API Gateway request id for the current invocation."""
    request_id.set(req_id or "")


def clear_request_context() -> None:
    """Clear request context after the invocation."""
    request_id.set("")


def log_response(
    logger: ContextLogger,
    status_code: int,
    duration_ms: Optional[float] = None,
) -> None:
    """Log the status code (and duration) of a handler response."""
    log_data: dict[str, Any] = {"status_code": status_code}
    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)

    level = logging.INFO if status_code < 400 else logging.WARNING
    if status_code >= 500:
        level = logging.ERROR
    logger.log(level, "Lambda response", extra={"response": log_data})
