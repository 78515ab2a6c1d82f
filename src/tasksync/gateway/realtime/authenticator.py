"""SessionAuthenticator -- 通道建立时的一次性身份校验

客户端在连接时以带外凭据提交 token（query `token`，或 `Authorization: Bearer` 头），
不会出现在任何消息体中。校验只复用 TokenService 的签名/有效期检查，不回查存储。
会话期间不再重新校验：token 在连接中途过期不会断开已准入的通道。
"""

import structlog
from starlette.requests import HTTPConnection
from tasksync.core.auth import TokenClaims, TokenService
from tasksync.core.exceptions import AuthenticationError, InvalidTokenError

log = structlog.get_logger()

_BEARER_PREFIX = "bearer "


def extract_token(connection: HTTPConnection) -> str | None:
    """从握手请求中提取 token

    优先使用 query `token`（浏览器 WebSocket 无法自定义请求头），
    其次回退到 Authorization 头。
    """
    token = connection.query_params.get("token")
    if token:
        return token

    auth_header = connection.headers.get("authorization", "")
    if auth_header.lower().startswith(_BEARER_PREFIX):
        bearer = auth_header[len(_BEARER_PREFIX):].strip()
        if bearer:
            return bearer

    return None


class SessionAuthenticator:
    """通道握手认证"""

    def __init__(self, token_service: TokenService) -> None:
        self._token_service = token_service

    def authenticate(self, token: str | None) -> TokenClaims:
        """校验 token 并返回身份声明

        Raises:
            AuthenticationError: token 缺失、无效或过期（对外统一为 "unauthorized"）
        """
        if not token:
            log.info("channel_refused", reason="missing_token")
            raise AuthenticationError()

        try:
            claims = self._token_service.verify(token)
        except InvalidTokenError as e:
            # 具体原因只进日志，不回传给客户端
            log.info("channel_refused", reason=e.message)
            raise AuthenticationError() from e

        return claims
