"""AuthService -- 注册/登录，签发身份 token

scrypt 是 CPU 密集操作，放到线程池中执行，避免阻塞事件循环。
"""

import asyncio

import structlog
from tasksync.core.auth import TokenService, hash_password, verify_password
from tasksync.core.exceptions import AuthenticationError
from tasksync.core.models import AuthResponse, LoginInput, RegisterInput, User
from tasksync.core.store import StoreGroup

log = structlog.get_logger()


class AuthService:
    """认证业务服务"""

    def __init__(self, store_group: StoreGroup, token_service: TokenService) -> None:
        self._stores = store_group
        self._tokens = token_service

    async def register(self, data: RegisterInput) -> AuthResponse:
        """注册新用户并直接返回 token

        Raises:
            ConflictError: 邮箱已注册
        """
        password_hash = await asyncio.to_thread(hash_password, data.password)
        user = await self._stores.user_store.create(
            email=str(data.email),
            name=data.name,
            password_hash=password_hash,
        )
        log.info("user_registered", user_id=user.id)
        return self._issue(user)

    async def login(self, data: LoginInput) -> AuthResponse:
        """校验邮箱密码并签发 token

        邮箱不存在与密码错误返回同一错误。
        """
        user = await self._stores.user_store.find_by_email(str(data.email))
        if user is None or not await asyncio.to_thread(
            verify_password, data.password, user.password_hash
        ):
            log.info("login_failed")
            raise AuthenticationError("Invalid email or password")

        log.info("user_logged_in", user_id=user.id)
        return self._issue(user)

    def _issue(self, user: User) -> AuthResponse:
        token = self._tokens.sign(user.id, user.email)
        return AuthResponse(user=user.to_public(), token=token)
