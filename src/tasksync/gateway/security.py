"""HTTP 请求认证 -- Authorization: Bearer <token>

token 校验后回查 UserStore，用户已被删除时同样视为未认证。
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from tasksync.core.auth import TokenService
from tasksync.core.exceptions import AuthenticationError
from tasksync.core.models import User
from tasksync.core.store import StoreGroup

from .deps import get_store_group, get_token_service

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    token_service: TokenService = Depends(get_token_service),
    store_group: StoreGroup = Depends(get_store_group),
) -> User:
    """解析当前请求的用户

    Raises:
        AuthenticationError: 缺少 token、token 无效或用户不存在
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    claims = token_service.verify(credentials.credentials)
    user = await store_group.user_store.find_by_id(claims.user_id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    return user
