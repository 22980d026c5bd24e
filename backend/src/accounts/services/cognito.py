"""Cognito user pool client used by every account handler.

The provider wraps the boto3 ``cognito-idp`` client and turns botocore
failures into ``IdentityProviderError`` carrying the Cognito error code.
Handlers decide what each code means for their endpoint through
``map_provider_error``.

SECURITY NOTES:
- Passwords, codes and tokens are passed through and never logged
- Filter values are escaped before being embedded in ListUsers filters
"""

from __future__ import annotations

import base64
import enum
import hashlib
import hmac
from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional

from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from accounts.config import CognitoSettings
from accounts.exceptions import AppError
from accounts.exceptions import ProviderUnavailableError
from accounts.exceptions import RateLimitError
from accounts.utils.logging import get_logger

logger = get_logger(__name__)

THROTTLING_ERROR_CODES = frozenset(
    {
        "TooManyRequestsException",
        "LimitExceededException",
        "TooManyFailedAttemptsException",
    }
)


class AccountStatus(str, enum.Enum):
    """Cognito ``UserStatus`` values."""

    UNCONFIRMED = "UNCONFIRMED"
    CONFIRMED = "CONFIRMED"
    ARCHIVED = "ARCHIVED"
    COMPROMISED = "COMPROMISED"
    RESET_REQUIRED = "RESET_REQUIRED"
    FORCE_CHANGE_PASSWORD = "FORCE_CHANGE_PASSWORD"
    EXTERNAL_PROVIDER = "EXTERNAL_PROVIDER"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AccountStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Account:
    """A Cognito user as seen by this service."""

    account_id: str
    email: Optional[str]
    status: AccountStatus

    @property
    def confirmed(self) -> bool:
        return self.status is AccountStatus.CONFIRMED


@dataclass(frozen=True)
class TokenSet:
    """Tokens returned by a successful password sign-in."""

    access_token: str
    id_token: str
    refresh_token: Optional[str]
    expires_in: int


@dataclass(frozen=True)
class AuthOutcome:
    """Result of ``InitiateAuth``: either tokens or a pending challenge."""

    tokens: Optional[TokenSet] = None
    challenge: Optional[str] = None


class IdentityProviderError(Exception):
    """Raised when a Cognito call fails.

    Attributes:
        error_code: Cognito error code, e.g. ``NotAuthorizedException``.
            ``TransportError`` is used when no response was received.
        operation: Name of the boto3 operation that failed.
    """

    def __init__(self, error_code: str, operation: str, message: str = ""):
        super().__init__(f"{operation} failed: {error_code} {message}".strip())
        self.error_code = error_code
        self.operation = operation

    @property
    def throttled(self) -> bool:
        return self.error_code in THROTTLING_ERROR_CODES


def map_provider_error(
    exc: IdentityProviderError,
    mapping: Optional[Mapping[str, Callable[[], AppError]]] = None,
) -> AppError:
    """Translate a provider failure into the endpoint's client error.

    Args:
        exc: The provider failure.
        mapping: Error code to error factory for codes the endpoint knows.

    Returns:
        The mapped error. Throttling falls back to ``RateLimitError`` and
        anything else to ``ProviderUnavailableError``.
    """
    if mapping and exc.error_code in mapping:
        return mapping[exc.error_code]()
    if exc.throttled:
        return RateLimitError()
    logger.error(
        "Unmapped identity provider error",
        extra={"operation": exc.operation, "error_code": exc.error_code},
    )
    return ProviderUnavailableError()


def escape_filter_value(value: str) -> str:
    """Escape a value for use inside a ListUsers filter string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class CognitoIdentityProvider:
    """Thin wrapper over the ``cognito-idp`` client for one user pool."""

    def __init__(self, client: Any, settings: CognitoSettings):
        self._client = client
        self._settings = settings

    @property
    def settings(self) -> CognitoSettings:
        return self._settings

    # -- lookups -----------------------------------------------------------

    def get_account(self, username: str) -> Optional[Account]:
        """Return the account with this username, or None."""
        try:
            response = self._call(
                "admin_get_user",
                UserPoolId=self._settings.user_pool_id,
                Username=username,
            )
        except IdentityProviderError as exc:
            if exc.error_code == "UserNotFoundException":
                return None
            raise
        attributes = _attributes(response.get("UserAttributes"))
        return Account(
            account_id=response["Username"],
            email=attributes.get("email"),
            status=AccountStatus.parse(response.get("UserStatus")),
        )

    def find_account_by_email(self, email: str) -> Optional[Account]:
        """Return the first account whose email attribute matches."""
        return self._find_one("email", email)

    def find_account_by_username(self, username: str) -> Optional[Account]:
        """Return the account whose username matches, via ListUsers."""
        return self._find_one("username", username)

    def _find_one(self, attribute: str, value: str) -> Optional[Account]:
        response = self._call(
            "list_users",
            UserPoolId=self._settings.user_pool_id,
            Filter=f'{attribute} = "{escape_filter_value(value)}"',
            Limit=1,
        )
        users = response.get("Users") or []
        if not users:
            return None
        user = users[0]
        attributes = _attributes(user.get("Attributes"))
        return Account(
            account_id=user["Username"],
            email=attributes.get("email"),
            status=AccountStatus.parse(user.get("UserStatus")),
        )

    # -- sign-in and sessions ---------------------------------------------

    def initiate_password_auth(self, username: str, password: str) -> AuthOutcome:
        """Verify a password with ``USER_PASSWORD_AUTH``. Single attempt."""
        auth_parameters = {"USERNAME": username, "PASSWORD": password}
        secret_hash = self._secret_hash(username)
        if secret_hash:
            auth_parameters["SECRET_HASH"] = secret_hash

        response = self._call(
            "initiate_auth",
            ClientId=self._settings.client_id,
            AuthFlow="USER_PASSWORD_AUTH",
            AuthParameters=auth_parameters,
        )
        result = response.get("AuthenticationResult")
        if not result:
            return AuthOutcome(challenge=response.get("ChallengeName") or "UNKNOWN")
        return AuthOutcome(
            tokens=TokenSet(
                access_token=result["AccessToken"],
                id_token=result["IdToken"],
                refresh_token=result.get("RefreshToken"),
                expires_in=int(result.get("ExpiresIn") or 3600),
            )
        )

    def get_username_for_token(self, access_token: str) -> str:
        """Return the username owning an access token (``GetUser``)."""
        response = self._call("get_user", AccessToken=access_token)
        return response["Username"]

    def global_sign_out(self, access_token: str) -> None:
        """Revoke every token issued for the session's user."""
        self._call("global_sign_out", AccessToken=access_token)

    # -- registration and recovery ----------------------------------------

    def sign_up(self, username: str, password: str, email: str) -> None:
        params: dict[str, Any] = {
            "ClientId": self._settings.client_id,
            "Username": username,
            "Password": password,
            "UserAttributes": [{"Name": "email", "Value": email}],
        }
        self._with_secret_hash(params, username)
        self._call("sign_up", **params)

    def confirm_sign_up(self, username: str, code: str) -> None:
        params: dict[str, Any] = {
            "ClientId": self._settings.client_id,
            "Username": username,
            "ConfirmationCode": code,
        }
        self._with_secret_hash(params, username)
        self._call("confirm_sign_up", **params)

    def resend_confirmation_code(self, username: str) -> None:
        params: dict[str, Any] = {
            "ClientId": self._settings.client_id,
            "Username": username,
        }
        self._with_secret_hash(params, username)
        self._call("resend_confirmation_code", **params)

    def forgot_password(self, username: str) -> None:
        params: dict[str, Any] = {
            "ClientId": self._settings.client_id,
            "Username": username,
        }
        self._with_secret_hash(params, username)
        self._call("forgot_password", **params)

    def confirm_forgot_password(
        self,
        username: str,
        code: str,
        new_password: str,
    ) -> None:
        params: dict[str, Any] = {
            "ClientId": self._settings.client_id,
            "Username": username,
            "ConfirmationCode": code,
            "Password": new_password,
        }
        self._with_secret_hash(params, username)
        self._call("confirm_forgot_password", **params)

    # -- helpers -----------------------------------------------------------

    def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        try:
            return getattr(self._client, operation)(**params)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            raise IdentityProviderError(
                error.get("Code") or "Unknown",
                operation,
                error.get("Message") or "",
            ) from exc
        except BotoCoreError as exc:
            raise IdentityProviderError("TransportError", operation, str(exc)) from exc

    def _secret_hash(self, username: str) -> Optional[str]:
        secret = self._settings.client_secret
        if not secret:
            return None
        message = (username + self._settings.client_id).encode("utf-8")
        digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()
        return base64.b64encode(digest).decode("utf-8")

    def _with_secret_hash(self, params: dict[str, Any], username: str) -> None:
        secret_hash = self._secret_hash(username)
        if secret_hash:
            params["SecretHash"] = secret_hash


def _attributes(raw: Optional[list[dict[str, str]]]) -> dict[str, str]:
    return {item["Name"]: item.get("Value", "") for item in raw or [] if "Name" in item}
