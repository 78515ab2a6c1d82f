"""枚举定义

包含 Priority、TaskStatus、EventKind 以及任务列表排序相关枚举。
"""

from enum import StrEnum


class Priority(StrEnum):
    """任务优先级"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


# 优先级排序权重（按声明顺序，而非字母序）
PRIORITY_RANK: dict[Priority, int] = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.URGENT: 3,
}


class TaskStatus(StrEnum):
    """任务状态 -- 任意状态之间都允许直接切换"""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"


class EventKind(StrEnum):
    """实时通道上推送的领域事件类型"""

    TASK_CREATED = "task:created"
    TASK_UPDATED = "task:updated"
    TASK_DELETED = "task:deleted"
    TASK_ASSIGNED = "task:assigned"


class SortField(StrEnum):
    """任务列表排序字段"""

    DUE_DATE = "due_date"
    CREATED_AT = "created_at"
    PRIORITY = "priority"


class SortOrder(StrEnum):
    """排序方向"""

    ASC = "asc"
    DESC = "desc"


class MutationKind(StrEnum):
    """任务变更类型（服务端已提交的变更 / 客户端进行中的乐观变更）"""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
