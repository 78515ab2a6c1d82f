"""TokenService 单元测试

测试内容：
1. 签发后校验得到相同身份
2. 过期 / 密钥错误 / 格式错误 / 缺少 claims 均抛出 InvalidTokenError
"""

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from tasksync.core.auth import TokenService
from tasksync.core.auth.tokens import JWT_ALGORITHM
from tasksync.core.exceptions import AuthenticationError, InvalidTokenError

SECRET = "tasksync-test-secret-0123456789abcdef"


class TestTokenRoundTrip:
    def test_verify_returns_signed_identity(self):
        service = TokenService(secret=SECRET)
        token = service.sign("user-42", "ada@example.com")

        claims = service.verify(token)

        assert claims.user_id == "user-42"
        assert claims.email == "ada@example.com"
        assert claims.expires_at > claims.issued_at

    def test_expiry_follows_configured_lifetime(self):
        service = TokenService(secret=SECRET, expires_in_s=60)
        issued = datetime.now(UTC).replace(microsecond=0)

        claims = service.verify(service.sign("u", "u@example.com", now=issued))

        assert claims.expires_at - claims.issued_at == timedelta(seconds=60)


class TestTokenRejection:
    def test_expired_token(self):
        service = TokenService(secret=SECRET, expires_in_s=60)
        token = service.sign("u", "u@example.com", now=datetime.now(UTC) - timedelta(hours=1))

        with pytest.raises(InvalidTokenError, match="expired"):
            service.verify(token)

    def test_wrong_secret(self):
        token = TokenService(secret=SECRET).sign("u", "u@example.com")
        other = TokenService(secret="another-secret-0123456789abcdefghij")

        with pytest.raises(InvalidTokenError):
            other.verify(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenError):
            TokenService(secret=SECRET).verify("not-a-jwt")

    def test_missing_subject_claim(self):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"email": "u@example.com", "iat": now, "exp": now + timedelta(minutes=5)},
            SECRET,
            algorithm=JWT_ALGORITHM,
        )

        with pytest.raises(InvalidTokenError):
            TokenService(secret=SECRET).verify(token)

    def test_invalid_token_is_authentication_error(self):
        with pytest.raises(AuthenticationError) as exc_info:
            TokenService(secret=SECRET).verify("x.y.z")

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "INVALID_TOKEN"

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService(secret="")
