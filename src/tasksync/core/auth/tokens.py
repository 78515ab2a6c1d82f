"""TokenService -- 签发/校验带有效期的身份 token

token 为 HS256 JWT，claims: sub(user_id) / email / iat / exp。
签发后不可变，校验只依赖签名和有效期，不回查任何存储。
"""

from datetime import UTC, datetime, timedelta

import jwt
from pydantic import BaseModel, Field

from ..exceptions import InvalidTokenError

JWT_ALGORITHM = "HS256"

# 默认有效期：7 天
DEFAULT_EXPIRES_IN_S = 7 * 24 * 3600


class TokenClaims(BaseModel):
    """token 中携带的身份声明"""

    user_id: str = Field(description="用户 ID")
    email: str = Field(description="用户邮箱")
    issued_at: datetime = Field(description="签发时间")
    expires_at: datetime = Field(description="过期时间")


class TokenService:
    """身份 token 服务"""

    def __init__(
        self,
        secret: str,
        expires_in_s: int = DEFAULT_EXPIRES_IN_S,
        leeway_s: int = 0,
    ) -> None:
        """
        Args:
            secret: HMAC 签名密钥
            expires_in_s: token 有效期（秒）
            leeway_s: 校验 exp/iat 时允许的时钟偏差（秒）
        """
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._expires_in_s = expires_in_s
        self._leeway_s = leeway_s

    def sign(self, user_id: str, email: str, now: datetime | None = None) -> str:
        """签发 token

        Args:
            user_id: 用户 ID
            email: 用户邮箱
            now: 签发时间（测试用，默认当前 UTC 时间）

        Returns:
            编码后的 JWT 字符串
        """
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self._expires_in_s),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """校验 token 签名与有效期

        Raises:
            InvalidTokenError: 签名错误、已过期、格式错误或缺少必需 claims
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                leeway=self._leeway_s,
                options={"require": ["sub", "email", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("token expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e

        return TokenClaims(
            user_id=str(payload["sub"]),
            email=str(payload["email"]),
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
