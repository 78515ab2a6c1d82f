"""HttpTaskApi 测试 -- httpx.MockTransport

测试内容：
1. 请求携带 Bearer token，响应解析为模型
2. 错误响应按状态码映射回异常
3. 连接失败 / 超时统一为 RequestFailedError
"""

import json

import httpx
import pytest
from tasksync.client import HttpTaskApi
from tasksync.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    RequestFailedError,
    ValidationError,
)
from tasksync.core.models import TaskFilter, TaskStatus, TaskUpdate


def _error(status: int, code: str, message: str = "boom", **extra) -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": code, "message": message, **extra}})


def _api(handler) -> HttpTaskApi:
    return HttpTaskApi(
        "http://test", token="tok-123", transport=httpx.MockTransport(handler)
    )


class TestSuccessfulRequests:
    async def test_list_tasks_sends_token_and_filters(self, make_task):
        task = make_task()
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[task.model_dump(mode="json")])

        async with _api(handler) as api:
            tasks = await api.list_tasks(TaskFilter(status=TaskStatus.TODO))

        assert tasks == [task]
        assert seen["auth"] == "Bearer tok-123"
        assert seen["params"] == {"status": "TODO", "sort_order": "asc"}

    async def test_update_sends_only_set_fields(self, make_task):
        task = make_task(assigned_to_id=None)
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=task.model_dump(mode="json"))

        async with _api(handler) as api:
            result = await api.update_task(task.id, TaskUpdate(assigned_to_id=None))

        assert result == task
        assert seen["method"] == "PATCH"
        assert seen["body"] == {"assigned_to_id": None}

    async def test_delete_no_content(self):
        async with _api(lambda request: httpx.Response(204)) as api:
            assert await api.delete_task("t-1") is None

    async def test_login_stores_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "user": {"id": "u1", "email": "a@example.com", "name": "Ada"},
                    "token": "fresh-token",
                },
            )

        async with _api(handler) as api:
            auth = await api.login("a@example.com", "password-123")

            assert auth.user.id == "u1"
            assert api.token == "fresh-token"


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("response", "expected"),
        [
            (_error(401, "UNAUTHORIZED"), AuthenticationError),
            (_error(401, "INVALID_TOKEN"), InvalidTokenError),
            (_error(403, "FORBIDDEN"), AuthorizationError),
            (_error(404, "TASK_NOT_FOUND"), NotFoundError),
            (_error(409, "EMAIL_ALREADY_REGISTERED"), ConflictError),
            (_error(400, "VALIDATION_FAILED"), ValidationError),
            (_error(500, "INTERNAL_ERROR"), RequestFailedError),
            (httpx.Response(502, text="Bad gateway"), RequestFailedError),
        ],
    )
    async def test_status_mapping(self, response, expected):
        async with _api(lambda request: response) as api:
            with pytest.raises(expected):
                await api.get_task("t-1")

    async def test_not_found_keeps_code(self):
        async with _api(lambda request: _error(404, "TASK_NOT_FOUND", "gone")) as api:
            with pytest.raises(NotFoundError) as exc_info:
                await api.delete_task("t-1")

        assert exc_info.value.code == "TASK_NOT_FOUND"
        assert exc_info.value.message == "gone"

    async def test_validation_details(self):
        details = [{"field": "title", "message": "too long"}]
        response = _error(400, "VALIDATION_FAILED", details=details)

        async with _api(lambda request: response) as api:
            with pytest.raises(ValidationError) as exc_info:
                await api.update_task("t-1", TaskUpdate(title="x"))

        assert exc_info.value.details == details


class TestTransportFailures:
    async def test_connect_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _api(handler) as api:
            with pytest.raises(RequestFailedError) as exc_info:
                await api.list_tasks()

        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _api(handler) as api:
            with pytest.raises(RequestFailedError, match="timed out"):
                await api.delete_task("t-1")

