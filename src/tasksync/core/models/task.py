"""Task Domain Model + 请求 DTO

creator_id 创建后不可变且不为空；assigned_to_id 可为空（未分配）。
TaskUpdate 只写入显式提供的字段，assigned_to_id 显式传 null 表示取消分配。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..config import TASK_TITLE_MAX_LENGTH
from .enums import Priority, SortField, SortOrder, TaskStatus


class Task(BaseModel):
    """Task 数据模型"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(description="任务描述")
    due_date: datetime = Field(description="截止时间")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="当前状态")
    creator_id: str = Field(description="创建者 ID，不可变")
    assigned_to_id: str | None = Field(default=None, description="被分配者 ID，可为空")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")


class TaskCreate(BaseModel):
    """创建任务请求体"""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=TASK_TITLE_MAX_LENGTH)
    description: str = Field(min_length=1)
    due_date: datetime
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    assigned_to_id: str | None = None


class TaskUpdate(BaseModel):
    """更新任务请求体 -- 所有字段可选"""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=TASK_TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, min_length=1)
    due_date: datetime | None = None
    priority: Priority | None = None
    status: TaskStatus | None = None
    assigned_to_id: str | None = None

    def changes(self) -> dict[str, Any]:
        """返回调用方显式设置的字段

        除 assigned_to_id 外，显式传入的 None 视为未提供。
        """
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key == "assigned_to_id"
        }


class TaskFilter(BaseModel):
    """任务列表筛选/排序条件"""

    status: TaskStatus | None = None
    priority: Priority | None = None
    sort_by: SortField | None = None
    sort_order: SortOrder = SortOrder.ASC
