"""Custom exception classes for the account handlers.

This module provides domain-specific exception classes that carry
the HTTP status code and the machine-readable error code returned
to clients.
"""

from __future__ import annotations

from typing import Any
from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    All application-specific exceptions should inherit from this class.
    Each exception carries an HTTP status code, an error code and optional
    extra body fields.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code (default 500).
        code: Machine-readable error code (default SERVER_ERROR).
        extra: Additional fields merged into the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "SERVER_ERROR",
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response body."""
        result: dict[str, Any] = {"message": self.message, "code": self.code}
        result.update(self.extra)
        return result


class ValidationError(AppError):
    """Raised when input validation fails.

    Use for malformed requests, missing fields or values that break
    the username, email or password rules.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_INPUT",
        details: Optional[dict[str, Any]] = None,
    ):
        extra = {"details": details} if details else None
        super().__init__(message, status_code=400, code=code, extra=extra)
        self.details = details or {}


class NotFoundError(AppError):
    """Raised when an account does not exist."""

    def __init__(
        self,
        message: str = "User not found.",
        details: Optional[dict[str, Any]] = None,
    ):
        extra = {"details": details} if details else None
        super().__init__(message, status_code=404, code="USER_NOT_FOUND", extra=extra)


class InvalidCredentialsError(AppError):
    """Raised when an identifier/password pair is rejected.

    Unknown accounts raise this too, so callers cannot tell the two apart.
    """

    def __init__(self, message: str = "Invalid Username/Email or Password."):
        super().__init__(message, status_code=401, code="INVALID_CREDENTIALS")


class SessionError(AppError):
    """Raised when the session cookie is missing, expired or rejected."""

    def __init__(self, message: str, code: str = "INVALID_SESSION"):
        super().__init__(message, status_code=401, code=code)


class UnconfirmedAccountError(AppError):
    """Raised when the account has not confirmed its email yet."""

    def __init__(self, username: str, email: Optional[str]):
        super().__init__(
            "Email verification required. Confirmation code has been resent.",
            status_code=403,
            code="CONFIRM_SIGN_UP",
            extra={"params": {"username": username, "email": email}},
        )
        self.username = username
        self.email = email


class AccountLockedError(AppError):
    """Raised when the account is inside its lockout window."""

    def __init__(self, remaining_minutes: int):
        super().__init__(
            "Account temporarily locked.",
            status_code=403,
            code="ACCOUNT_LOCKED",
            extra={"required": {"remainingTime": remaining_minutes}},
        )
        self.remaining_minutes = remaining_minutes


class AuthIncompleteError(AppError):
    """Raised when the provider answers a sign-in with a further challenge."""

    def __init__(self, username: str, email: Optional[str], challenge: str):
        super().__init__(
            "Further authentication required.",
            status_code=403,
            code="AUTH_INCOMPLETE",
            extra={
                "details": {
                    "username": username,
                    "email": email,
                    "nextStep": challenge,
                }
            },
        )
        self.challenge = challenge


class ConflictError(AppError):
    """Raised when a resource already exists or is already in the target state."""

    def __init__(self, message: str, code: str):
        super().__init__(message, status_code=409, code=code)


class CodeError(AppError):
    """Raised when a verification or reset code is wrong or stale."""

    def __init__(self, message: str, code: str, status_code: int = 400):
        super().__init__(message, status_code=status_code, code=code)


class RateLimitError(AppError):
    """Raised when the identity provider throttles the request."""

    def __init__(self, message: str = "Too many attempts. Please try again later."):
        super().__init__(message, status_code=429, code="RATE_LIMIT_EXCEEDED")


class ProviderUnavailableError(AppError):
    """Raised when the identity provider fails for any unmapped reason."""

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message, status_code=500, code="SERVER_ERROR")


class ConfigurationError(AppError):
    """Raised when required configuration is missing.

    The missing name is kept on the exception for logs and never sent to
    the client.
    """

    def __init__(self, config_name: str):
        super().__init__("Internal Server Error", status_code=500)
        self.config_name = config_name

    def __str__(self) -> str:
        return f"Missing required configuration: {self.config_name}"


class DatabaseError(AppError):
    """Raised when a database operation fails.

    The open transaction has always been rolled back by the time this
    is raised.
    """

    def __init__(
        self,
        message: str = "Database error occurred. Please try again later.",
    ):
        super().__init__(message, status_code=500, code="DATABASE_ERROR")
