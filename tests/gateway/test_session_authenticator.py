"""SessionAuthenticator / extract_token 测试"""

from datetime import UTC, datetime, timedelta

import pytest
from starlette.requests import HTTPConnection
from tasksync.core.exceptions import AuthenticationError, InvalidTokenError
from tasksync.gateway.realtime import SessionAuthenticator, extract_token


def _handshake(query: bytes = b"", headers: list[tuple[bytes, bytes]] | None = None):
    return HTTPConnection(
        {
            "type": "websocket",
            "path": "/ws/channel",
            "query_string": query,
            "headers": headers or [],
        }
    )


class TestExtractToken:
    def test_query_token(self):
        assert extract_token(_handshake(b"token=abc")) == "abc"

    def test_bearer_header(self):
        conn = _handshake(headers=[(b"authorization", b"Bearer xyz")])
        assert extract_token(conn) == "xyz"

    def test_query_wins_over_header(self):
        conn = _handshake(b"token=abc", [(b"authorization", b"Bearer xyz")])
        assert extract_token(conn) == "abc"

    def test_missing(self):
        assert extract_token(_handshake()) is None
        assert extract_token(_handshake(headers=[(b"authorization", b"Basic xx")])) is None


class TestAuthenticate:
    def test_valid_token(self, token_service):
        authenticator = SessionAuthenticator(token_service)
        token = token_service.sign("user-1", "a@example.com")

        claims = authenticator.authenticate(token)

        assert claims.user_id == "user-1"

    def test_missing_token(self, token_service):
        with pytest.raises(AuthenticationError) as exc_info:
            SessionAuthenticator(token_service).authenticate(None)
        assert exc_info.value.message == "unauthorized"

    def test_expired_token_reports_generic_reason(self, token_service):
        token = token_service.sign(
            "user-1", "a@example.com", now=datetime.now(UTC) - timedelta(days=30)
        )

        with pytest.raises(AuthenticationError) as exc_info:
            SessionAuthenticator(token_service).authenticate(token)

        assert not isinstance(exc_info.value, InvalidTokenError)
        assert exc_info.value.message == "unauthorized"

    def test_tampered_token(self, token_service):
        token = token_service.sign("user-1", "a@example.com")
        header, payload, signature = token.split(".")
        forged = f"{header}.{payload}.{'A' * len(signature)}"

        with pytest.raises(AuthenticationError):
            SessionAuthenticator(token_service).authenticate(forged)
