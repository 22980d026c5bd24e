"""Pytest configuration and fixtures for backend tests.

This module provides shared fixtures for testing the account handlers:
a SQLite database, an in-memory stand-in for the Cognito user pool
client, a controllable clock and API Gateway event builders.
"""

from __future__ import annotations

import json
import os
import re
import sys
import time
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from pathlib import Path
from typing import Any
from typing import Optional
from uuid import uuid4

import jwt
import pytest
from botocore.exceptions import ClientError

# Add backend source to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

TOKEN_SIGNING_KEY = 'test-signing-key'
_FILTER_PATTERN = re.compile(r'^(\w+) = "(.*)"$')


# --- Database Fixtures ---


@pytest.fixture(scope='session')
def test_database_url() -> str:
    """Get the test database URL.

    Uses SQLite in-memory by default for fast, isolated tests.
    Set TEST_DATABASE_URL environment variable to use a real PostgreSQL database.
    """
    return os.getenv('TEST_DATABASE_URL', 'sqlite:///:memory:')


@pytest.fixture(scope='session')
def test_engine(test_database_url: str):
    """Create a test database engine and schema for the whole session."""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool

    from accounts.db.base import Base

    if test_database_url.startswith('sqlite'):
        engine = create_engine(
            test_database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(test_database_url)

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_engine(test_engine):
    """The shared engine, with every table emptied after the test.

    The code under test commits its own transactions, so rows are removed
    explicitly instead of rolling back.
    """
    from accounts.db.base import Base

    yield test_engine

    with test_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


# --- Clock ---


class FrozenClock:
    """Clock returning a fixed UTC time that tests move forward by hand."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


# --- Cognito Fixtures ---


def client_error(code: str, operation: str, message: str = '') -> ClientError:
    """Build a botocore ClientError like the cognito-idp client raises."""
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


class FakeCognitoClient:
    """In-memory stand-in for the boto3 ``cognito-idp`` client.

    Implements only the operations the account handlers call, with the
    error codes Cognito returns for them.

    Attributes:
        users: Username to ``{'email', 'password', 'status'}``.
        failures: Operation name to the error code it should raise next.
        challenge: When set, ``initiate_auth`` answers with this challenge.
        calls: Every call made, as ``(operation, kwargs)``.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.confirmation_codes: dict[str, str] = {}
        self.reset_codes: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.failures: dict[str, str] = {}
        self.challenge: Optional[str] = None
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def add_user(
        self,
        username: str,
        email: str,
        password: str = 'Passw0rd!',
        status: str = 'CONFIRMED',
    ) -> None:
        self.users[username] = {'email': email, 'password': password, 'status': status}

    def issue_token(self, username: str, expires_in: int = 3600) -> str:
        token = jwt.encode(
            {
                'username': username,
                'exp': int(time.time()) + expires_in,
                'jti': str(uuid4()),
            },
            TOKEN_SIGNING_KEY,
            algorithm='HS256',
        )
        self.tokens[token] = username
        return token

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    # -- boto3 operations --------------------------------------------------

    def admin_get_user(self, UserPoolId: str, Username: str) -> dict[str, Any]:
        self._record('admin_get_user', UserPoolId=UserPoolId, Username=Username)
        user = self._require_user('admin_get_user', Username)
        return {
            'Username': Username,
            'UserAttributes': [{'Name': 'email', 'Value': user['email']}],
            'UserStatus': user['status'],
        }

    def list_users(self, UserPoolId: str, Filter: str, Limit: int) -> dict[str, Any]:
        self._record('list_users', UserPoolId=UserPoolId, Filter=Filter, Limit=Limit)
        match = _FILTER_PATTERN.match(Filter)
        if match is None:
            raise client_error('InvalidParameterException', 'ListUsers')
        attribute, value = match.groups()
        found = []
        for username, user in self.users.items():
            candidate = username if attribute == 'username' else user.get(attribute)
            if candidate == value:
                found.append(
                    {
                        'Username': username,
                        'Attributes': [{'Name': 'email', 'Value': user['email']}],
                        'UserStatus': user['status'],
                    }
                )
        return {'Users': found[:Limit]}

    def initiate_auth(
        self,
        ClientId: str,
        AuthFlow: str,
        AuthParameters: dict[str, str],
    ) -> dict[str, Any]:
        self._record(
            'initiate_auth',
            ClientId=ClientId,
            AuthFlow=AuthFlow,
            AuthParameters=AuthParameters,
        )
        username = AuthParameters['USERNAME']
        user = self.users.get(username)
        if user is None:
            raise client_error('UserNotFoundException', 'InitiateAuth')
        if user['password'] != AuthParameters['PASSWORD']:
            raise client_error(
                'NotAuthorizedException', 'InitiateAuth', 'Incorrect username or password.'
            )
        if user['status'] == 'UNCONFIRMED':
            raise client_error('UserNotConfirmedException', 'InitiateAuth')
        if self.challenge:
            return {'ChallengeName': self.challenge, 'Session': 'challenge-session'}
        return {
            'AuthenticationResult': {
                'AccessToken': self.issue_token(username),
                'IdToken': f'id-token-{username}',
                'RefreshToken': f'refresh-token-{username}',
                'ExpiresIn': 3600,
                'TokenType': 'Bearer',
            }
        }

    def get_user(self, AccessToken: str) -> dict[str, Any]:
        self._record('get_user', AccessToken=AccessToken)
        username = self.tokens.get(AccessToken)
        if username is None:
            raise client_error('NotAuthorizedException', 'GetUser', 'Access Token has been revoked')
        if username not in self.users:
            raise client_error('UserNotFoundException', 'GetUser')
        return {'Username': username, 'UserAttributes': []}

    def global_sign_out(self, AccessToken: str) -> dict[str, Any]:
        self._record('global_sign_out', AccessToken=AccessToken)
        username = self.tokens.get(AccessToken)
        if username is None:
            raise client_error('NotAuthorizedException', 'GlobalSignOut')
        self.tokens = {
            token: owner for token, owner in self.tokens.items() if owner != username
        }
        return {}

    def sign_up(
        self,
        ClientId: str,
        Username: str,
        Password: str,
        UserAttributes: list[dict[str, str]],
        SecretHash: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record('sign_up', ClientId=ClientId, Username=Username, SecretHash=SecretHash)
        if Username in self.users:
            raise client_error('UsernameExistsException', 'SignUp')
        email = next(item['Value'] for item in UserAttributes if item['Name'] == 'email')
        self.add_user(Username, email, Password, status='UNCONFIRMED')
        self.confirmation_codes[Username] = '123456'
        return {'UserConfirmed': False, 'UserSub': str(uuid4())}

    def confirm_sign_up(
        self,
        ClientId: str,
        Username: str,
        ConfirmationCode: str,
        SecretHash: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record('confirm_sign_up', ClientId=ClientId, Username=Username)
        user = self._require_user('confirm_sign_up', Username)
        if user['status'] == 'CONFIRMED':
            raise client_error(
                'NotAuthorizedException',
                'ConfirmSignUp',
                'User cannot be confirmed. Current status is CONFIRMED',
            )
        if self.confirmation_codes.get(Username) != ConfirmationCode:
            raise client_error('CodeMismatchException', 'ConfirmSignUp')
        user['status'] = 'CONFIRMED'
        return {}

    def resend_confirmation_code(
        self,
        ClientId: str,
        Username: str,
        SecretHash: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record('resend_confirmation_code', ClientId=ClientId, Username=Username)
        self._require_user('resend_confirmation_code', Username)
        self.confirmation_codes[Username] = '654321'
        return {'CodeDeliveryDetails': {'DeliveryMedium': 'EMAIL'}}

    def forgot_password(
        self,
        ClientId: str,
        Username: str,
        SecretHash: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record('forgot_password', ClientId=ClientId, Username=Username)
        self._require_user('forgot_password', Username)
        self.reset_codes[Username] = '999999'
        return {'CodeDeliveryDetails': {'DeliveryMedium': 'EMAIL'}}

    def confirm_forgot_password(
        self,
        ClientId: str,
        Username: str,
        ConfirmationCode: str,
        Password: str,
        SecretHash: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record('confirm_forgot_password', ClientId=ClientId, Username=Username)
        user = self._require_user('confirm_forgot_password', Username)
        if self.reset_codes.get(Username) != ConfirmationCode:
            raise client_error('CodeMismatchException', 'ConfirmForgotPassword')
        user['password'] = Password
        return {}

    # -- helpers -------------------------------------------------------------

    def _record(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        code = self.failures.pop(operation, None)
        if code is not None:
            raise client_error(code, operation)

    def _require_user(self, operation: str, username: str) -> dict[str, Any]:
        user = self.users.get(username)
        if user is None:
            raise client_error('UserNotFoundException', operation, 'User does not exist.')
        return user


@pytest.fixture
def cognito_settings():
    from accounts.config import CognitoSettings

    return CognitoSettings(user_pool_id='eu-west-1_TestPool', client_id='test-client-id')


@pytest.fixture
def cognito_client() -> FakeCognitoClient:
    return FakeCognitoClient()


@pytest.fixture
def provider(cognito_client, cognito_settings):
    """A real CognitoIdentityProvider over the in-memory client."""
    from accounts.services.cognito import CognitoIdentityProvider

    return CognitoIdentityProvider(cognito_client, cognito_settings)


@pytest.fixture
def ledger(db_engine, clock):
    from accounts.auth.lockout import LockoutLedger
    from accounts.config import LockoutPolicy

    return LockoutLedger(db_engine, LockoutPolicy(), clock=clock)


@pytest.fixture
def wired(provider, ledger, db_engine):
    """Route the endpoint handlers to the test provider, ledger and engine."""
    from accounts.api import dependencies

    dependencies.override(provider=provider, ledger=ledger, engine=db_engine)
    yield
    dependencies.reset()


# --- API Event Fixtures ---


def make_event(
    method: str = 'POST',
    path: str = '/users/login',
    body: Optional[dict[str, Any]] = None,
    cookies: Optional[dict[str, str]] = None,
    query: Optional[dict[str, str]] = None,
    headers: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Build an API Gateway proxy event."""
    event_headers = {'Content-Type': 'application/json', 'Origin': 'https://pixele.gg'}
    if cookies:
        event_headers['Cookie'] = '; '.join(f'{name}={value}' for name, value in cookies.items())
    event_headers.update(headers or {})
    return {
        'httpMethod': method,
        'path': path,
        'queryStringParameters': query or {},
        'multiValueQueryStringParameters': {},
        'headers': event_headers,
        'requestContext': {'requestId': str(uuid4())},
        'body': json.dumps(body) if body is not None else None,
        'isBase64Encoded': False,
    }


def response_body(response: dict[str, Any]) -> dict[str, Any]:
    return json.loads(response['body'])


def response_cookies(response: dict[str, Any]) -> dict[str, str]:
    """Map cookie name to its full Set-Cookie value."""
    values = (response.get('multiValueHeaders') or {}).get('Set-Cookie', [])
    return {value.split('=', 1)[0]: value for value in values}


@pytest.fixture
def api_gateway_event() -> dict[str, Any]:
    """Base API Gateway event structure."""
    return make_event()


# --- Mock Fixtures ---


@pytest.fixture
def mock_boto3_client(mocker):
    """Mock boto3 client for AWS service calls."""
    return mocker.patch('boto3.client')
