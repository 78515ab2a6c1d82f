"""gateway 测试配置 -- 完整 app（含 lifespan）+ httpx AsyncClient"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

GATEWAY_TEST_SECRET = "gateway-test-secret-0123456789abcdef"

_ENV_KEYS = ["TASKSYNC_DB_PATH", "TASKSYNC_JWT_SECRET", "LOGFIRE_SEND_TO_LOGFIRE"]


@pytest.fixture
def gateway_env(tmp_path: Path):
    """设置测试环境变量，结束后清理"""
    os.environ["TASKSYNC_DB_PATH"] = str(tmp_path / "sqlite" / "gateway.db")
    os.environ["TASKSYNC_JWT_SECRET"] = GATEWAY_TEST_SECRET
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"
    yield tmp_path
    for key in _ENV_KEYS:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def app(gateway_env):
    """创建测试用 FastAPI app，并运行 lifespan"""
    from tasksync.gateway.main import create_app

    application = create_app()
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def register_user(client: AsyncClient) -> Callable[..., Awaitable[tuple[dict, dict]]]:
    """注册用户，返回 (user, Authorization 头)"""

    async def _register(name: str, email: str | None = None) -> tuple[dict, dict]:
        resp = await client.post(
            "/api/v1/auth/register",
            json={
                "email": email or f"{name.lower()}@example.com",
                "password": "password-123",
                "name": name,
            },
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register
