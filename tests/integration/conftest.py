"""端到端测试配置 -- 真实 gateway（含 lifespan）+ HttpTaskApi + SyncController"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport
from tasksync.client import HttpTaskApi

_ENV_KEYS = ["TASKSYNC_DB_PATH", "TASKSYNC_JWT_SECRET", "LOGFIRE_SEND_TO_LOGFIRE"]


@pytest_asyncio.fixture
async def e2e_app(tmp_path: Path):
    os.environ["TASKSYNC_DB_PATH"] = str(tmp_path / "sqlite" / "e2e.db")
    os.environ["TASKSYNC_JWT_SECRET"] = "e2e-test-secret-0123456789abcdefgh"
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from tasksync.gateway.main import create_app

    application = create_app()
    async with application.router.lifespan_context(application):
        yield application

    for key in _ENV_KEYS:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def open_api(e2e_app) -> AsyncGenerator:
    """注册用户并返回已登录的 HttpTaskApi，测试结束后统一关闭"""
    apis: list[HttpTaskApi] = []

    async def _open(name: str):
        api = HttpTaskApi("http://test", transport=ASGITransport(app=e2e_app))
        apis.append(api)
        auth = await api.register(f"{name.lower()}@example.com", "password-123", name)
        return api, auth.user

    yield _open

    for api in apis:
        await api.aclose()
