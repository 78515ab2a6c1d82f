"""TaskStore SQLite 实现

每个变更方法在单个事务内提交（单行提交，原子），失败时回滚并抛出。
update/delete 在 id 无法解析时抛出 NotFoundError。
时间统一以 UTC ISO 字符串落盘，保证字典序即时间序。
"""

from datetime import UTC, datetime
from typing import Any

import aiosqlite
from ulid import ULID

from ..exceptions import NotFoundError
from ..models.enums import PRIORITY_RANK, SortField, SortOrder, TaskStatus
from ..models.task import Task, TaskCreate, TaskFilter

# 可更新的列（creator_id / created_at 创建后不可变）
_UPDATABLE_COLUMNS = (
    "title",
    "description",
    "due_date",
    "priority",
    "status",
    "assigned_to_id",
)

# 优先级按权重排序，而非字母序
_PRIORITY_ORDER_SQL = (
    "CASE priority "
    + " ".join(f"WHEN '{p.value}' THEN {rank}" for p, rank in PRIORITY_RANK.items())
    + " END"
)

_SORT_COLUMNS: dict[SortField, str] = {
    SortField.DUE_DATE: "due_date",
    SortField.CREATED_AT: "created_at",
    SortField.PRIORITY: _PRIORITY_ORDER_SQL,
}


def to_db_time(value: datetime) -> str:
    """datetime -> UTC ISO 字符串（naive 视为 UTC）"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def task_not_found(task_id: str) -> NotFoundError:
    return NotFoundError(f"Task with id {task_id} does not exist", code="TASK_NOT_FOUND")


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create(self, fields: TaskCreate, creator_id: str) -> Task:
        """创建任务并提交，返回落盘后的 Task"""
        now = datetime.now(UTC)
        task = Task(
            id=str(ULID()),
            title=fields.title,
            description=fields.description,
            due_date=fields.due_date,
            priority=fields.priority,
            status=fields.status,
            creator_id=creator_id,
            assigned_to_id=fields.assigned_to_id,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._conn.execute(
                """
                INSERT INTO tasks (id, title, description, due_date, priority, status,
                                   creator_id, assigned_to_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    to_db_time(task.due_date),
                    task.priority.value,
                    task.status.value,
                    task.creator_id,
                    task.assigned_to_id,
                    to_db_time(task.created_at),
                    to_db_time(task.updated_at),
                ),
            )
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        return await self._get_or_raise(task.id)

    async def find_by_id(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        cursor = await self._conn.execute(
            "SELECT * FROM tasks WHERE id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def find_all(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """按状态/优先级筛选，按指定字段排序；未指定排序时按 created_at 倒序"""
        task_filter = task_filter or TaskFilter()
        clauses: list[str] = []
        params: list[Any] = []

        if task_filter.status:
            clauses.append("status = ?")
            params.append(task_filter.status.value)
        if task_filter.priority:
            clauses.append("priority = ?")
            params.append(task_filter.priority.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        if task_filter.sort_by:
            direction = "DESC" if task_filter.sort_order == SortOrder.DESC else "ASC"
            order_by = f"{_SORT_COLUMNS[task_filter.sort_by]} {direction}, id ASC"
        else:
            order_by = "created_at DESC, id DESC"

        cursor = await self._conn.execute(
            f"SELECT * FROM tasks {where} ORDER BY {order_by}",
            params,
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def find_by_assignee(self, user_id: str) -> list[Task]:
        """查询分配给指定用户的任务，按截止时间正序"""
        cursor = await self._conn.execute(
            "SELECT * FROM tasks WHERE assigned_to_id = ? ORDER BY due_date ASC, id ASC",
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def find_by_creator(self, user_id: str) -> list[Task]:
        """查询指定用户创建的任务，按创建时间倒序"""
        cursor = await self._conn.execute(
            "SELECT * FROM tasks WHERE creator_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def find_overdue(self, now: datetime | None = None) -> list[Task]:
        """查询已过截止时间且未完成的任务，按截止时间正序"""
        now = now or datetime.now(UTC)
        cursor = await self._conn.execute(
            """
            SELECT * FROM tasks
            WHERE due_date < ? AND status != ?
            ORDER BY due_date ASC, id ASC
            """,
            (to_db_time(now), TaskStatus.COMPLETED.value),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update(self, task_id: str, fields: dict[str, Any]) -> Task:
        """部分字段更新并提交

        即使字段值未变化也会刷新 updated_at。

        Raises:
            NotFoundError: 任务不存在
            ValueError: 包含不可更新的字段
        """
        unknown = set(fields) - set(_UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"fields not updatable: {sorted(unknown)}")

        assignments = ["updated_at = ?"]
        params: list[Any] = [to_db_time(datetime.now(UTC))]
        for column in _UPDATABLE_COLUMNS:
            if column not in fields:
                continue
            value = fields[column]
            if isinstance(value, datetime):
                value = to_db_time(value)
            elif hasattr(value, "value"):
                value = value.value
            assignments.append(f"{column} = ?")
            params.append(value)
        params.append(task_id)

        try:
            cursor = await self._conn.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            if cursor.rowcount == 0:
                await self._conn.rollback()
                raise task_not_found(task_id)
            await self._conn.commit()
        except NotFoundError:
            raise
        except Exception:
            await self._conn.rollback()
            raise
        return await self._get_or_raise(task_id)

    async def delete(self, task_id: str) -> None:
        """删除任务并提交

        Raises:
            NotFoundError: 任务不存在
        """
        try:
            cursor = await self._conn.execute(
                "DELETE FROM tasks WHERE id = ?",
                (task_id,),
            )
            if cursor.rowcount == 0:
                await self._conn.rollback()
                raise task_not_found(task_id)
            await self._conn.commit()
        except NotFoundError:
            raise
        except Exception:
            await self._conn.rollback()
            raise

    async def _get_or_raise(self, task_id: str) -> Task:
        task = await self.find_by_id(task_id)
        if task is None:
            raise task_not_found(task_id)
        return task

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row[0],
            title=row[1],
            description=row[2],
            due_date=datetime.fromisoformat(row[3]),
            priority=row[4],
            status=row[5],
            creator_id=row[6],
            assigned_to_id=row[7],
            created_at=datetime.fromisoformat(row[8]),
            updated_at=datetime.fromisoformat(row[9]),
        )
