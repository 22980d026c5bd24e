"""Session cookies carrying Cognito tokens.

The access token lives in ``pixele_session``, the id token in
``pixele_id`` and the refresh token in ``pixele_refresh``. All three are
HttpOnly, Secure and SameSite=Strict.
"""

from __future__ import annotations

import time
from http.cookies import SimpleCookie
from typing import Any
from typing import Mapping
from typing import Optional

import jwt

from accounts.config import CookieSettings
from accounts.config import ID_COOKIE
from accounts.config import REFRESH_COOKIE
from accounts.config import SESSION_COOKIE
from accounts.exceptions import SessionError
from accounts.services.cognito import TokenSet
from accounts.utils.parsers import parse_cookies

SESSION_COOKIES = (SESSION_COOKIE, ID_COOKIE, REFRESH_COOKIE)


def build_cookie(
    name: str,
    value: str,
    max_age: int,
    settings: CookieSettings,
) -> str:
    """Serialize one ``Set-Cookie`` header value."""
    jar: SimpleCookie = SimpleCookie()
    jar[name] = value
    morsel = jar[name]
    morsel["httponly"] = True
    morsel["secure"] = settings.secure
    morsel["samesite"] = "Strict"
    morsel["path"] = "/"
    morsel["max-age"] = max(0, max_age)
    if settings.domain:
        morsel["domain"] = settings.domain
    return morsel.OutputString()


def session_cookies(tokens: TokenSet, settings: CookieSettings) -> list[str]:
    """Cookies issued after a successful sign-in."""
    cookies = [
        build_cookie(SESSION_COOKIE, tokens.access_token, tokens.expires_in, settings),
        build_cookie(ID_COOKIE, tokens.id_token, tokens.expires_in, settings),
    ]
    if tokens.refresh_token:
        cookies.append(
            build_cookie(
                REFRESH_COOKIE,
                tokens.refresh_token,
                settings.refresh_max_age,
                settings,
            )
        )
    return cookies


def cleared_session_cookies(settings: CookieSettings) -> list[str]:
    """Expired copies of every session cookie, used on logout."""
    return [build_cookie(name, "", 0, settings) for name in SESSION_COOKIES]


def get_session_token(event: Mapping[str, Any]) -> Optional[str]:
    """Return the access token from the request cookies, if any."""
    return parse_cookies(event).get(SESSION_COOKIE) or None


def read_unverified_claims(token: str) -> dict[str, Any]:
    """Decode token claims without verifying the signature.

    Only used to short-circuit obviously expired sessions; Cognito remains
    the authority on whether the token is valid.

    Raises:
        SessionError: INVALID_SESSION if the token cannot be decoded.
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError as exc:
        raise SessionError("Invalid/Expired session.", code="INVALID_SESSION") from exc


def ensure_not_expired(claims: Mapping[str, Any], now: Optional[float] = None) -> None:
    """Raise SESSION_EXPIRED when the ``exp`` claim is in the past."""
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        raise SessionError("Invalid/Expired session.", code="INVALID_SESSION")
    current = time.time() if now is None else now
    if exp < current:
        raise SessionError("Session expired.", code="SESSION_EXPIRED")
