"""TaskApi -- 客户端访问 Task Store 的请求接口

HttpTaskApi 基于 httpx.AsyncClient，把 gateway 的错误响应按状态码映射回
tasksync.core.exceptions 中的同一组异常；连接失败和超时统一为 RequestFailedError。
"""

from typing import Any, Protocol

import httpx
import structlog
from tasksync.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    RequestFailedError,
    TaskSyncError,
    ValidationError,
)
from tasksync.core.models import (
    AuthResponse,
    Task,
    TaskCreate,
    TaskFilter,
    TaskUpdate,
    UserPublic,
)

log = structlog.get_logger()

DEFAULT_TIMEOUT_S = 10.0


class TaskApi(Protocol):
    """SyncController 依赖的请求接口"""

    async def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        ...

    async def create_task(self, data: TaskCreate) -> Task:
        ...

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        ...

    async def delete_task(self, task_id: str) -> None:
        ...


def _error_from_response(response: httpx.Response) -> TaskSyncError:
    """将非 2xx 响应转换为对应异常"""
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        error = {}
    code = error.get("code")
    message = error.get("message") or response.reason_phrase or "request failed"

    match response.status_code:
        case 401 if code == InvalidTokenError.code:
            return InvalidTokenError(message)
        case 401:
            return AuthenticationError(message)
        case 403:
            return AuthorizationError(message, code=code)
        case 404:
            return NotFoundError(message, code=code)
        case 409:
            return ConflictError(message, code=code)
        case 400 | 422:
            return ValidationError(message, details=error.get("details"))
        case status:
            return RequestFailedError(f"unexpected response {status}: {message}")


class HttpTaskApi:
    """基于 httpx 的 TaskApi 实现"""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: gateway 地址，例如 http://localhost:8000
            token: 身份 token，可稍后通过 login/register 获取
            timeout_s: 单次请求超时（秒）
            transport: 自定义传输层（测试时传入 httpx.ASGITransport）
        """
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_s,
            transport=transport,
        )

    @property
    def token(self) -> str | None:
        return self._token

    async def __aenter__(self) -> "HttpTaskApi":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- 认证 ----

    async def register(self, email: str, password: str, name: str) -> AuthResponse:
        data = await self._request(
            "POST",
            "/api/v1/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        auth = AuthResponse.model_validate(data)
        self._token = auth.token
        return auth

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request(
            "POST",
            "/api/v1/auth/login",
            json={"email": email, "password": password},
        )
        auth = AuthResponse.model_validate(data)
        self._token = auth.token
        return auth

    async def list_users(self) -> list[UserPublic]:
        data = await self._request("GET", "/api/v1/users")
        return [UserPublic.model_validate(item) for item in data]

    # ---- 任务 ----

    async def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        params = {}
        if task_filter is not None:
            params = task_filter.model_dump(mode="json", exclude_none=True)
        data = await self._request("GET", "/api/v1/tasks", params=params)
        return [Task.model_validate(item) for item in data]

    async def get_task(self, task_id: str) -> Task:
        data = await self._request("GET", f"/api/v1/tasks/{task_id}")
        return Task.model_validate(data)

    async def create_task(self, data: TaskCreate) -> Task:
        body = await self._request(
            "POST",
            "/api/v1/tasks",
            json=data.model_dump(mode="json"),
        )
        return Task.model_validate(body)

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        body = await self._request(
            "PATCH",
            f"/api/v1/tasks/{task_id}",
            json=data.model_dump(mode="json", exclude_unset=True),
        )
        return Task.model_validate(body)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/api/v1/tasks/{task_id}")

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.TimeoutException as e:
            log.warning("api_request_timeout", method=method, path=path)
            raise RequestFailedError(f"{method} {path} timed out", original_error=e) from e
        except httpx.HTTPError as e:
            log.warning(
                "api_request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RequestFailedError(f"{method} {path} failed: {e}", original_error=e) from e

        if response.is_error:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()
