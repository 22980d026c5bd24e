"""Tests for utility parser and response functions."""

from __future__ import annotations

import base64
import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from accounts.exceptions import ValidationError
from accounts.utils.parsers import (
    collect_query_params,
    first_param,
    get_header,
    parse_cookies,
    parse_json_body,
)
from accounts.utils.responses import (
    error_response,
    get_cors_headers,
    json_response,
    validate_content_type,
)


class TestGetHeader:
    """Tests for get_header function."""

    def test_case_insensitive(self) -> None:
        event = {'headers': {'content-TYPE': 'application/json'}}
        assert get_header(event, 'Content-Type') == 'application/json'

    def test_falls_back_to_multi_value_headers(self) -> None:
        event = {'headers': {}, 'multiValueHeaders': {'Origin': ['https://a', 'https://b']}}
        assert get_header(event, 'origin') == 'https://a'

    def test_missing(self) -> None:
        assert get_header({'headers': None}, 'origin') is None
        assert get_header(None, 'origin') is None


class TestCollectQueryParams:
    """Tests for collect_query_params function."""

    def test_returns_empty_dict_for_no_params(self) -> None:
        assert collect_query_params({}) == {}

    def test_collects_single_value_params(self) -> None:
        event = {'queryStringParameters': {'username': 'player1'}}
        assert collect_query_params(event) == {'username': ['player1']}

    def test_multi_value_wins(self) -> None:
        event = {
            'queryStringParameters': {'username': 'b'},
            'multiValueQueryStringParameters': {'username': ['a', 'b']},
        }
        assert collect_query_params(event) == {'username': ['a', 'b']}

    def test_first_param(self) -> None:
        assert first_param({'username': ['a', 'b']}, 'username') == 'a'
        assert first_param({}, 'username') is None


class TestParseJsonBody:
    """Tests for parse_json_body function."""

    def test_parses_object(self) -> None:
        assert parse_json_body({'body': '{"a": 1}'}) == {'a': 1}

    def test_empty_body_is_empty_object(self) -> None:
        assert parse_json_body({'body': None}) == {}
        assert parse_json_body({'body': ''}) == {}

    def test_base64_body(self) -> None:
        encoded = base64.b64encode(b'{"a": "b"}').decode()
        assert parse_json_body({'body': encoded, 'isBase64Encoded': True}) == {'a': 'b'}

    @pytest.mark.parametrize('raw', ['{broken', '[1, 2]', '"text"'])
    def test_rejects_non_objects(self, raw) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_json_body({'body': raw})
        assert exc_info.value.code == 'INVALID_INPUT'


class TestParseCookies:
    """Tests for parse_cookies function."""

    def test_parses_cookie_header(self) -> None:
        event = {'headers': {'Cookie': 'pixele_session=abc.def-ghi; theme=dark'}}
        assert parse_cookies(event) == {'pixele_session': 'abc.def-ghi', 'theme': 'dark'}

    def test_multi_value_cookie_headers(self) -> None:
        event = {'headers': {}, 'multiValueHeaders': {'cookie': ['a=1', 'b=2']}}
        assert parse_cookies(event) == {'a': '1', 'b': '2'}

    def test_no_cookies(self) -> None:
        assert parse_cookies({'headers': {}}) == {}


class TestResponses:
    """Tests for response builders."""

    def test_json_response_shape(self) -> None:
        response = json_response(200, {'ok': True})
        assert response['statusCode'] == 200
        assert json.loads(response['body']) == {'ok': True}
        assert response['headers']['Content-Type'] == 'application/json'
        assert response['headers']['Cache-Control'].startswith('no-store')
        assert 'multiValueHeaders' not in response

    def test_cookies_go_to_multi_value_headers(self) -> None:
        response = json_response(200, {}, cookies=['a=1', 'b=2'])
        assert response['multiValueHeaders'] == {'Set-Cookie': ['a=1', 'b=2']}

    def test_error_response(self) -> None:
        response = error_response(500, 'Failed', code='LOGOUT_FAILED')
        assert json.loads(response['body']) == {'message': 'Failed', 'code': 'LOGOUT_FAILED'}

    def test_cors_echoes_allowed_origin(self, monkeypatch) -> None:
        monkeypatch.setenv('CORS_ALLOWED_ORIGINS', 'https://pixele.gg,https://dev.pixele.gg')
        headers = get_cors_headers({'headers': {'Origin': 'https://dev.pixele.gg'}})
        assert headers['Access-Control-Allow-Origin'] == 'https://dev.pixele.gg'

    def test_cors_ignores_unknown_origin(self, monkeypatch) -> None:
        monkeypatch.delenv('CORS_ALLOWED_ORIGINS', raising=False)
        headers = get_cors_headers({'headers': {'Origin': 'https://evil.example'}})
        assert headers['Access-Control-Allow-Origin'] == 'https://pixele.gg'


class TestValidateContentType:
    """Tests for validate_content_type function."""

    def test_accepts_json_with_charset(self) -> None:
        validate_content_type(
            {'httpMethod': 'POST', 'headers': {'Content-Type': 'application/json; charset=utf-8'}}
        )

    def test_ignores_get(self) -> None:
        validate_content_type({'httpMethod': 'GET', 'headers': {}})

    @pytest.mark.parametrize('headers', [{}, {'Content-Type': 'text/plain'}])
    def test_rejects_post_without_json(self, headers) -> None:
        with pytest.raises(ValidationError):
            validate_content_type({'httpMethod': 'POST', 'headers': headers})
