"""client 测试配置 -- 内存版 TaskApi"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from tasksync.client import SyncController
from tasksync.core.exceptions import NotFoundError
from tasksync.core.models import Task, TaskCreate, TaskFilter, TaskUpdate
from ulid import ULID


class FakeTaskApi:
    """内存中的 Task Store

    - errors: 依次在后续请求中抛出的异常
    - on_call: 请求"进行中"时执行一次（模拟响应前到达的事件）
    - after_commit: 提交后、返回响应前执行一次（模拟先于响应到达的事件）
    """

    def __init__(self) -> None:
        self.tasks: dict[str, Task] = {}
        self.errors: list[Exception] = []
        self.on_call: Callable[[], None] | None = None
        self.after_commit: Callable[[Task | str], None] | None = None
        self.calls: list[str] = []
        self._clock = datetime(2027, 1, 1, tzinfo=UTC)

    def seed(self, task: Task) -> Task:
        self.tasks[task.id] = task
        return task

    def tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        self._in_flight("list")
        return list(self.tasks.values())

    async def create_task(self, data: TaskCreate) -> Task:
        self._in_flight("create")
        now = self.tick()
        task = Task(
            id=str(ULID()),
            creator_id="user-1",
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.tasks[task.id] = task
        self._committed(task)
        return task

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        self._in_flight("update")
        if task_id not in self.tasks:
            raise NotFoundError("Task not found", code="TASK_NOT_FOUND")
        task = self.tasks[task_id].model_copy(
            update={**data.changes(), "updated_at": self.tick()}
        )
        self.tasks[task_id] = task
        self._committed(task)
        return task

    async def delete_task(self, task_id: str) -> None:
        self._in_flight("delete")
        if task_id not in self.tasks:
            raise NotFoundError("Task not found", code="TASK_NOT_FOUND")
        del self.tasks[task_id]
        self._committed(task_id)

    def _in_flight(self, name: str) -> None:
        self.calls.append(name)
        if self.on_call is not None:
            hook, self.on_call = self.on_call, None
            hook()
        if self.errors:
            raise self.errors.pop(0)

    def _committed(self, result: Task | str) -> None:
        if self.after_commit is not None:
            hook, self.after_commit = self.after_commit, None
            hook(result)


@pytest.fixture
def api() -> FakeTaskApi:
    return FakeTaskApi()


@pytest.fixture
def assigned_events() -> list:
    return []


@pytest.fixture
def controller(api: FakeTaskApi, assigned_events: list) -> SyncController:
    return SyncController(api, user_id="user-1", on_assigned=assigned_events.append)
