"""全局 pytest 配置 -- 临时 SQLite 数据库 + 常用对象工厂"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from tasksync.core.auth import TokenService
from tasksync.core.models import Priority, Task, TaskStatus
from tasksync.core.store import StoreGroup, create_store_group

TEST_JWT_SECRET = "tasksync-test-secret-0123456789abcdef"


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的 StoreGroup"""
    group = await create_store_group(str(tmp_db_path))
    yield group
    await group.conn.close()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=TEST_JWT_SECRET)


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """构造内存中的 Task（不落盘），字段可覆盖"""

    def _make(**overrides) -> Task:
        now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
        fields = {
            "id": "01JTASK0000000000000000001",
            "title": "Write report",
            "description": "Quarterly numbers",
            "due_date": now + timedelta(days=3),
            "priority": Priority.MEDIUM,
            "status": TaskStatus.TODO,
            "creator_id": "user-1",
            "assigned_to_id": None,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Task(**fields)

    return _make
