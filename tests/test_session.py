"""Tests for session cookie helpers."""

from __future__ import annotations

import sys
import time
from pathlib import Path

import jwt
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from accounts.auth.session import (
    build_cookie,
    cleared_session_cookies,
    ensure_not_expired,
    get_session_token,
    read_unverified_claims,
    session_cookies,
)
from accounts.config import CookieSettings
from accounts.exceptions import SessionError
from accounts.services.cognito import TokenSet


class TestBuildCookie:
    """Tests for build_cookie function."""

    def test_security_attributes(self) -> None:
        cookie = build_cookie('pixele_session', 'token', 900, CookieSettings())
        assert cookie.startswith('pixele_session=token')
        assert 'HttpOnly' in cookie
        assert 'Secure' in cookie
        assert 'SameSite=Strict' in cookie
        assert 'Path=/' in cookie
        assert 'Max-Age=900' in cookie
        assert 'Domain' not in cookie

    def test_domain_and_insecure(self) -> None:
        settings = CookieSettings(domain='.pixele.gg', secure=False)
        cookie = build_cookie('pixele_session', 'token', 900, settings)
        assert 'Domain=.pixele.gg' in cookie
        assert 'Secure' not in cookie

    def test_negative_max_age_is_clamped(self) -> None:
        cookie = build_cookie('pixele_session', '', -5, CookieSettings())
        assert 'Max-Age=0' in cookie


class TestSessionCookies:
    """Tests for session_cookies and cleared_session_cookies."""

    def test_all_three_cookies(self) -> None:
        tokens = TokenSet('access', 'id', 'refresh', 900)
        cookies = session_cookies(tokens, CookieSettings(refresh_max_age=86400))
        assert [c.split('=', 1)[0] for c in cookies] == [
            'pixele_session',
            'pixele_id',
            'pixele_refresh',
        ]
        assert 'Max-Age=86400' in cookies[2]

    def test_no_refresh_cookie_without_refresh_token(self) -> None:
        cookies = session_cookies(TokenSet('access', 'id', None, 900), CookieSettings())
        assert len(cookies) == 2

    def test_cleared_cookies_expire(self) -> None:
        cookies = cleared_session_cookies(CookieSettings())
        assert len(cookies) == 3
        assert all('Max-Age=0' in c for c in cookies)

    def test_get_session_token(self) -> None:
        event = {'headers': {'Cookie': 'pixele_session=abc; pixele_id=def'}}
        assert get_session_token(event) == 'abc'
        assert get_session_token({'headers': {}}) is None


class TestClaims:
    """Tests for unverified claim decoding."""

    def test_reads_claims_without_key(self) -> None:
        token = jwt.encode({'sub': 'player1', 'exp': 10}, 'other-key', algorithm='HS256')
        assert read_unverified_claims(token)['sub'] == 'player1'

    def test_garbage_token(self) -> None:
        with pytest.raises(SessionError) as exc_info:
            read_unverified_claims('not-a-jwt')
        assert exc_info.value.code == 'INVALID_SESSION'

    def test_expired(self) -> None:
        with pytest.raises(SessionError) as exc_info:
            ensure_not_expired({'exp': 100}, now=200)
        assert exc_info.value.code == 'SESSION_EXPIRED'

    def test_missing_exp(self) -> None:
        with pytest.raises(SessionError) as exc_info:
            ensure_not_expired({})
        assert exc_info.value.code == 'INVALID_SESSION'

    def test_not_expired(self) -> None:
        ensure_not_expired({'exp': time.time() + 60})
