"""TaskSync Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    PRIORITY_RANK,
    EventKind,
    MutationKind,
    Priority,
    SortField,
    SortOrder,
    TaskStatus,
)
from .events import (
    DomainEvent,
    TaskAssignedEvent,
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskUpdatedEvent,
    assignment_message,
    event_to_wire,
    parse_event,
)
from .task import Task, TaskCreate, TaskFilter, TaskUpdate
from .user import AuthResponse, LoginInput, RegisterInput, User, UserPublic

__all__ = [
    # 枚举
    "Priority",
    "PRIORITY_RANK",
    "TaskStatus",
    "EventKind",
    "MutationKind",
    "SortField",
    "SortOrder",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilter",
    # User
    "User",
    "UserPublic",
    "RegisterInput",
    "LoginInput",
    "AuthResponse",
    # Events
    "DomainEvent",
    "TaskCreatedEvent",
    "TaskUpdatedEvent",
    "TaskDeletedEvent",
    "TaskAssignedEvent",
    "assignment_message",
    "parse_event",
    "event_to_wire",
]
