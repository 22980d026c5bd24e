"""Pydantic request models for the account endpoints."""

from __future__ import annotations

from typing import Annotated
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StringConstraints

# Identifiers are case-insensitive; secrets are taken exactly as typed.
Identifier = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_lower=True, min_length=1),
]
Secret = Annotated[str, StringConstraints(min_length=1)]
Code = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RequestModel(BaseModel):
    """Base for request bodies: strict strings, camelCase aliases."""

    model_config = ConfigDict(strict=True, populate_by_name=True)


class LoginRequest(RequestModel):
    identifier: Identifier
    password: Secret


class RegisterRequest(RequestModel):
    username: Identifier
    email: Identifier
    password: Secret


class VerifyRequest(RequestModel):
    username: Identifier
    verification_code: Code = Field(alias="verificationCode")


class ResendVerificationRequest(RequestModel):
    username: Identifier


class PasswordResetEmailRequest(RequestModel):
    identifier: Identifier


class PasswordResetConfirmRequest(RequestModel):
    username: Identifier
    confirmation_code: Code = Field(alias="confirmationCode")
    new_password: Secret = Field(alias="newPassword")


class UserInfo(BaseModel):
    """Public user fields returned after sign-in."""

    username: str
    email: Optional[str] = None
