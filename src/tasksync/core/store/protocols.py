"""Store Protocol 接口定义

定义 TaskStore、UserStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from datetime import datetime
from typing import Any, Protocol

from ..models.task import Task, TaskCreate, TaskFilter
from ..models.user import User


class TaskStore(Protocol):
    """Task 存储接口 -- 每个变更单行原子提交"""

    async def create(self, fields: TaskCreate, creator_id: str) -> Task:
        """创建任务"""
        ...

    async def find_by_id(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        ...

    async def find_all(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """筛选 + 排序查询"""
        ...

    async def find_by_assignee(self, user_id: str) -> list[Task]:
        """查询分配给指定用户的任务"""
        ...

    async def find_by_creator(self, user_id: str) -> list[Task]:
        """查询指定用户创建的任务"""
        ...

    async def find_overdue(self, now: datetime | None = None) -> list[Task]:
        """查询逾期未完成的任务"""
        ...

    async def update(self, task_id: str, fields: dict[str, Any]) -> Task:
        """部分更新，任务不存在时抛出 NotFoundError"""
        ...

    async def delete(self, task_id: str) -> None:
        """删除，任务不存在时抛出 NotFoundError"""
        ...


class UserStore(Protocol):
    """User 存储接口"""

    async def create(self, email: str, name: str, password_hash: str) -> User:
        """创建用户，邮箱重复时抛出 ConflictError"""
        ...

    async def find_by_id(self, user_id: str) -> User | None:
        ...

    async def find_by_email(self, email: str) -> User | None:
        ...

    async def find_all(self) -> list[User]:
        ...
