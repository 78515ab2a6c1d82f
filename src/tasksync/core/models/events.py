"""领域事件 -- 实时通道上的封闭 tagged union

每种事件一个变体，以 `event` 字段作为判别标签：
- task:created  -> 全体通道，完整 Task
- task:updated  -> 全体通道，完整 Task
- task:deleted  -> 全体通道，仅 task_id
- task:assigned -> 仅 room user:<assignee_id>，提示文案 + 完整 Task

事件是瞬时的：不落盘，不回放给发布时离线的客户端。
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .task import Task


class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class TaskCreatedEvent(_EventBase):
    """task:created 事件"""

    event: Literal["task:created"] = "task:created"
    task: Task


class TaskUpdatedEvent(_EventBase):
    """task:updated 事件（任意字段变更，包括状态和分配）"""

    event: Literal["task:updated"] = "task:updated"
    task: Task


class TaskDeletedEvent(_EventBase):
    """task:deleted 事件"""

    event: Literal["task:deleted"] = "task:deleted"
    task_id: str


class TaskAssignedEvent(_EventBase):
    """task:assigned 事件 -- 定向推送给新的被分配者"""

    event: Literal["task:assigned"] = "task:assigned"
    message: str
    task: Task
    assignee_id: str


DomainEvent = Annotated[
    TaskCreatedEvent | TaskUpdatedEvent | TaskDeletedEvent | TaskAssignedEvent,
    Field(discriminator="event"),
]

_event_adapter: TypeAdapter[DomainEvent] = TypeAdapter(DomainEvent)


def assignment_message(task: Task) -> str:
    """构造 task:assigned 的提示文案"""
    return f"You have been assigned to task: {task.title}"


def parse_event(raw: str | bytes | dict[str, Any]) -> DomainEvent:
    """将通道消息解码为具体的事件变体

    Raises:
        pydantic.ValidationError: 未知的 event 标签或字段不合法
    """
    if isinstance(raw, dict):
        return _event_adapter.validate_python(raw)
    return _event_adapter.validate_json(raw)


def event_to_wire(event: DomainEvent) -> dict[str, Any]:
    """将事件序列化为可直接 send_json 的 dict"""
    return event.model_dump(mode="json")
