"""TaskCache -- 客户端本地任务视图

- tasks: 当前可见的任务（含尚未确认的乐观条目）
- tombstones: 已确认删除的任务 id；之后到达的同 id 事件或响应一律忽略，防止"复活"
- pending: 进行中的乐观变更，记录回滚所需的快照
"""

from dataclasses import dataclass, field
from typing import Any

from tasksync.core.models import MutationKind, Task


@dataclass
class PendingMutation:
    """一次尚未得到服务端确认的乐观变更"""

    mutation_id: str
    kind: MutationKind
    task_id: str
    # 变更前的缓存值（create 时为 None）
    snapshot: Task | None = None
    # 乐观写入缓存的值（delete 时为 None）
    applied: Task | None = None
    # update 提交的字段，用于在快照变化后重建 applied
    changes: dict[str, Any] = field(default_factory=dict)


class TaskCache:
    """按 task id 索引的本地缓存"""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._tombstones: set[str] = set()
        self._pending: dict[str, PendingMutation] = {}

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def contains(self, task_id: str) -> bool:
        return task_id in self._tasks

    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def is_tombstoned(self, task_id: str) -> bool:
        return task_id in self._tombstones

    def put(self, task: Task) -> None:
        """无条件写入（乐观写入和回滚使用）"""
        self._tasks[task.id] = task

    def remove(self, task_id: str) -> Task | None:
        return self._tasks.pop(task_id, None)

    def merge(self, task: Task) -> bool:
        """合并服务端版本

        已删除的任务、或缓存中 updated_at 严格更新的版本不会被覆盖。
        重复合并同一版本不产生变化。

        Returns:
            是否写入了缓存
        """
        if task.id in self._tombstones:
            return False
        existing = self._tasks.get(task.id)
        if existing is not None and existing.updated_at > task.updated_at:
            return False
        self._tasks[task.id] = task
        return True

    def tombstone(self, task_id: str) -> None:
        """移除并标记为已删除"""
        self._tasks.pop(task_id, None)
        self._tombstones.add(task_id)

    def replace_all(self, tasks: list[Task]) -> None:
        """用服务端全量结果替换缓存

        进行中的乐观条目保留，等待各自的确认/回滚。
        全量结果是权威状态，墓碑只保留仍有进行中变更的 id。
        """
        in_flight = {
            m.applied.id: m.applied
            for m in self._pending.values()
            if m.applied is not None and self._tasks.get(m.applied.id) is m.applied
        }
        self._tombstones &= {m.task_id for m in self._pending.values()}
        self._tasks = {t.id: t for t in tasks if t.id not in self._tombstones}
        for task_id, task in in_flight.items():
            if task_id not in self._tombstones:
                self._tasks[task_id] = task

    # ---- 进行中的乐观变更 ----

    @property
    def pending(self) -> list[PendingMutation]:
        return list(self._pending.values())

    def begin(self, mutation: PendingMutation) -> None:
        self._pending[mutation.mutation_id] = mutation

    def finish(self, mutation_id: str) -> PendingMutation | None:
        return self._pending.pop(mutation_id, None)

    def rebase(self, task_id: str, stale: Task, base: Task) -> None:
        """以 stale 为快照的进行中变更改为以 base 为快照

        同一任务上叠加的乐观更新，前一个被回滚后，后一个的快照和乐观值都要
        换成回滚后的状态；仍显示在缓存中的乐观值随之重建，并沿链继续传递。
        """
        for m in list(self._pending.values()):
            if m.task_id != task_id or m.snapshot is not stale:
                continue
            m.snapshot = base
            if m.applied is None:
                continue
            old_applied = m.applied
            m.applied = base.model_copy(update=m.changes)
            if self._tasks.get(task_id) is old_applied:
                self._tasks[task_id] = m.applied
            self.rebase(task_id, old_applied, m.applied)
