"""SyncController -- 乐观变更 + 实时事件合并

请求路径：先乐观写入本地缓存，再等待服务端结果；
- 成功：以服务端结果替换乐观条目
- 失败：精确回滚该条目后重新抛出异常（每次失败只回滚一次）

事件路径：apply_event 按 task id 合并，幂等；无法解析的消息记录日志后丢弃。
事件与请求响应的到达顺序不固定，两种顺序收敛到同一状态。
删除优先：一旦收到 task:deleted，该 id 不会再被任何响应、回滚或事件恢复。
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, assert_never

import pydantic
import structlog
from tasksync.core.models import (
    DomainEvent,
    MutationKind,
    Task,
    TaskAssignedEvent,
    TaskCreate,
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskFilter,
    TaskUpdate,
    TaskUpdatedEvent,
    parse_event,
)
from ulid import ULID

from .api import TaskApi
from .cache import PendingMutation, TaskCache

log = structlog.get_logger()

# 乐观创建的临时 id 前缀，确认后替换为服务端 id
PROVISIONAL_PREFIX = "local-"


class SyncController:
    """客户端同步控制器"""

    def __init__(
        self,
        api: TaskApi,
        cache: TaskCache | None = None,
        user_id: str | None = None,
        on_assigned: Callable[[TaskAssignedEvent], None] | None = None,
    ) -> None:
        """
        Args:
            api: 访问 Task Store 的请求接口
            cache: 本地缓存，默认新建
            user_id: 当前用户 id，用作乐观创建条目的 creator_id
            on_assigned: 收到 task:assigned 时的通知回调
        """
        self._api = api
        self.cache = cache or TaskCache()
        self._user_id = user_id
        self._on_assigned = on_assigned
        self._opened_once = False
        self._connected = False
        self._last_filter: TaskFilter | None = None

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def pending_mutations(self) -> list[PendingMutation]:
        return self.cache.pending

    def tasks(self) -> list[Task]:
        return self.cache.tasks()

    def get(self, task_id: str) -> Task | None:
        return self.cache.get(task_id)

    async def refresh(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """从服务端全量拉取并替换缓存"""
        tasks = await self._api.list_tasks(task_filter)
        self._last_filter = task_filter
        self.cache.replace_all(tasks)
        log.info("cache_refreshed", count=len(tasks))
        return self.cache.tasks()

    # ---- 请求路径：乐观变更 ----

    async def create_task(self, data: TaskCreate) -> Task:
        now = datetime.now(UTC)
        provisional = Task(
            id=f"{PROVISIONAL_PREFIX}{ULID()}",
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            priority=data.priority,
            status=data.status,
            creator_id=self._user_id or "",
            assigned_to_id=data.assigned_to_id,
            created_at=now,
            updated_at=now,
        )
        mutation = self._begin(MutationKind.CREATE, provisional.id, None, provisional)
        self.cache.put(provisional)

        try:
            task = await self._api.create_task(data)
        except Exception as e:
            self.cache.finish(mutation.mutation_id)
            self.cache.remove(provisional.id)
            self._log_rollback(mutation, e)
            raise

        self.cache.finish(mutation.mutation_id)
        self.cache.remove(provisional.id)
        self.cache.merge(task)
        return task

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        changes = data.changes()
        snapshot = self.cache.get(task_id)
        applied = None
        if snapshot is not None:
            applied = snapshot.model_copy(update=changes)
            self.cache.put(applied)
        mutation = self._begin(MutationKind.UPDATE, task_id, snapshot, applied, changes)

        try:
            task = await self._api.update_task(task_id, data)
        except Exception as e:
            self.cache.finish(mutation.mutation_id)
            # 快照可能已被先回滚的同任务变更重建，以 mutation 上的值为准；
            # 只在缓存中仍是本次乐观值时恢复，期间到达的事件或删除优先
            if mutation.applied is not None:
                if self.cache.get(task_id) is mutation.applied:
                    self.cache.put(mutation.snapshot)
                self.cache.rebase(task_id, mutation.applied, mutation.snapshot)
            self._log_rollback(mutation, e)
            raise

        self.cache.finish(mutation.mutation_id)
        if snapshot is None or self.cache.contains(task_id):
            self.cache.merge(task)
        return task

    async def delete_task(self, task_id: str) -> None:
        snapshot = self.cache.remove(task_id)
        mutation = self._begin(MutationKind.DELETE, task_id, snapshot, None)

        try:
            await self._api.delete_task(task_id)
        except Exception as e:
            self.cache.finish(mutation.mutation_id)
            if (
                mutation.snapshot is not None
                and not self.cache.is_tombstoned(task_id)
                and not self.cache.contains(task_id)
            ):
                self.cache.put(mutation.snapshot)
            self._log_rollback(mutation, e)
            raise

        self.cache.finish(mutation.mutation_id)
        self.cache.tombstone(task_id)

    # ---- 事件路径 ----

    def apply_event(self, event: DomainEvent) -> None:
        """合并一条领域事件；重复应用同一事件不产生变化"""
        match event:
            case TaskCreatedEvent(task=task) | TaskUpdatedEvent(task=task):
                self.cache.merge(task)
            case TaskDeletedEvent(task_id=task_id):
                self.cache.tombstone(task_id)
            case TaskAssignedEvent(task=task):
                self.cache.merge(task)
                if self._on_assigned is not None:
                    self._on_assigned(event)
            case _:
                assert_never(event)

    def handle_message(self, raw: str | bytes | dict[str, Any]) -> DomainEvent | None:
        """解析并应用通道消息；格式错误的消息被丢弃

        Returns:
            成功应用的事件，丢弃时返回 None
        """
        try:
            event = parse_event(raw)
        except pydantic.ValidationError as e:
            log.warning("event_dropped", reason="malformed", error_count=e.error_count())
            return None
        self.apply_event(event)
        return event

    # ---- 通道生命周期 ----

    async def on_channel_open(self) -> None:
        """通道建立；重新建立（非首次）时全量刷新，补齐断线期间错过的事件"""
        self._connected = True
        if not self._opened_once:
            self._opened_once = True
            return
        log.info("channel_reestablished")
        await self.refresh(self._last_filter)

    def on_channel_closed(self) -> None:
        self._connected = False
        log.info("channel_lost")

    def _begin(
        self,
        kind: MutationKind,
        task_id: str,
        snapshot: Task | None,
        applied: Task | None,
        changes: dict[str, Any] | None = None,
    ) -> PendingMutation:
        mutation = PendingMutation(
            mutation_id=str(ULID()),
            kind=kind,
            task_id=task_id,
            snapshot=snapshot,
            applied=applied,
            changes=changes or {},
        )
        self.cache.begin(mutation)
        return mutation

    @staticmethod
    def _log_rollback(mutation: PendingMutation, error: Exception) -> None:
        log.info(
            "optimistic_rollback",
            kind=mutation.kind.value,
            task_id=mutation.task_id,
            error_type=type(error).__name__,
        )
