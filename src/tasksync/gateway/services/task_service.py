"""TaskService -- 任务变更/查询业务逻辑

变更流程：
1. 校验（被分配者必须存在、删除只允许创建者）
2. TaskStore 单行原子提交
3. 提交成功后交给 EventBroadcaster 发布事件

任何一步失败都会直接抛出，不会发布事件。
"""

from datetime import datetime

import structlog
from tasksync.core.exceptions import AuthorizationError, ValidationError
from tasksync.core.models import Task, TaskCreate, TaskFilter, TaskUpdate, User
from tasksync.core.store import StoreGroup
from tasksync.core.store.task_store import task_not_found

from ..realtime import EventBroadcaster, MutationOutcome

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, broadcaster: EventBroadcaster) -> None:
        self._stores = store_group
        self._broadcaster = broadcaster

    async def create_task(self, data: TaskCreate, creator: User) -> Task:
        """创建任务并广播 task:created（已分配时追加 task:assigned）"""
        await self._ensure_assignee_exists(data.assigned_to_id)

        task = await self._stores.task_store.create(data, creator.id)
        log.info(
            "task_created",
            task_id=task.id,
            creator_id=creator.id,
            assigned_to_id=task.assigned_to_id,
        )

        self._broadcaster.publish(MutationOutcome.created(task))
        return task

    async def update_task(self, task_id: str, data: TaskUpdate, actor: User) -> Task:
        """部分更新任务并广播 task:updated

        任意已认证用户都可以更新。被分配者变化时额外定向推送 task:assigned。
        字段没有实际变化的更新同样会广播。
        """
        changes = data.changes()
        if changes.get("assigned_to_id") is not None:
            await self._ensure_assignee_exists(changes["assigned_to_id"])

        previous = await self.get_task(task_id)
        task = await self._stores.task_store.update(task_id, changes)
        log.info(
            "task_updated",
            task_id=task.id,
            actor_id=actor.id,
            fields=sorted(changes),
        )

        self._broadcaster.publish(
            MutationOutcome.updated(task, previous.assigned_to_id)
        )
        return task

    async def delete_task(self, task_id: str, actor: User) -> None:
        """删除任务并广播 task:deleted

        Raises:
            NotFoundError: 任务不存在
            AuthorizationError: 操作者不是创建者
        """
        task = await self.get_task(task_id)
        if task.creator_id != actor.id:
            raise AuthorizationError("Only the task creator can delete this task")

        await self._stores.task_store.delete(task_id)
        log.info("task_deleted", task_id=task_id, actor_id=actor.id)

        self._broadcaster.publish(MutationOutcome.deleted(task_id))

    async def get_task(self, task_id: str) -> Task:
        task = await self._stores.task_store.find_by_id(task_id)
        if task is None:
            raise task_not_found(task_id)
        return task

    async def list_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        return await self._stores.task_store.find_all(task_filter)

    async def assigned_to(self, user: User) -> list[Task]:
        return await self._stores.task_store.find_by_assignee(user.id)

    async def created_by(self, user: User) -> list[Task]:
        return await self._stores.task_store.find_by_creator(user.id)

    async def overdue(
        self, user: User | None = None, now: datetime | None = None
    ) -> list[Task]:
        """逾期未完成的任务；指定 user 时只保留其创建或被分配的任务"""
        tasks = await self._stores.task_store.find_overdue(now)
        if user is None:
            return tasks
        return [
            t for t in tasks if t.creator_id == user.id or t.assigned_to_id == user.id
        ]

    async def _ensure_assignee_exists(self, assignee_id: str | None) -> None:
        if assignee_id is None:
            return
        if await self._stores.user_store.find_by_id(assignee_id) is None:
            raise ValidationError(
                details=[
                    {"field": "assigned_to_id", "message": "Assigned user does not exist"}
                ],
            )
