"""Input validation rules for account fields."""

from __future__ import annotations

import re

from better_profanity import profanity

from accounts.exceptions import ValidationError

USERNAME_MIN_LENGTH = 5
USERNAME_MAX_LENGTH = 18
PASSWORD_MIN_LENGTH = 8

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
_DIGIT_PATTERN = re.compile(r"\d")
_SPECIAL_PATTERN = re.compile(r"[^A-Za-z0-9]")

_PASSWORD_REQUIREMENTS = {
    "minLength": PASSWORD_MIN_LENGTH,
    "requiresNumber": True,
    "requiresSpecialChar": True,
}


def validate_email(value: str) -> str:
    """Validate an email address.

    Returns:
        The email address unchanged.

    Raises:
        ValidationError: With code INVALID_EMAIL.
    """
    if not _EMAIL_PATTERN.match(value):
        raise ValidationError(
            "Enter a valid email.",
            code="INVALID_EMAIL",
            details={"providedEmail": value},
        )
    return value


def validate_username(value: str) -> str:
    """Validate username length and character set.

    Raises:
        ValidationError: With code INVALID_USERNAME.
    """
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters.",
            code="INVALID_USERNAME",
            details={
                "requirements": {
                    "minLength": USERNAME_MIN_LENGTH,
                    "maxLength": USERNAME_MAX_LENGTH,
                }
            },
        )
    if not _USERNAME_PATTERN.match(value):
        raise ValidationError(
            "Username cannot contain any special characters.",
            code="INVALID_USERNAME",
            details={"requirements": {"allowedCharacters": "alphanumeric"}},
        )
    return value


def validate_password(value: str) -> str:
    """Validate password strength: length, a digit and a special character.

    Raises:
        ValidationError: With code INVALID_PASSWORD.
    """
    if (
        len(value) < PASSWORD_MIN_LENGTH
        or not _DIGIT_PATTERN.search(value)
        or not _SPECIAL_PATTERN.search(value)
    ):
        raise ValidationError(
            "Password requirements not met.",
            code="INVALID_PASSWORD",
            details={"requirements": dict(_PASSWORD_REQUIREMENTS)},
        )
    return value


def validate_clean_username(value: str) -> str:
    """Reject usernames containing profanity.

    Raises:
        ValidationError: With code INAPPROPRIATE_CONTENT.
    """
    if profanity.contains_profanity(value):
        raise ValidationError(
            "Seriously?",
            code="INAPPROPRIATE_CONTENT",
            details={"username": value},
        )
    return value
