"""EventBroadcaster -- 已提交的任务变更 -> 领域事件

只能在变更成功提交到 TaskStore 之后调用；提交失败时调用方不得发布任何事件。
- create -> task:created（全体）
- update -> task:updated（全体）
- delete -> task:deleted（全体，仅 task_id）
- 新的 assigned_to_id 非空且与之前不同 -> 额外发送 task:assigned 给 room user:<assignee>
"""

from dataclasses import dataclass

import structlog
from tasksync.core.models import (
    DomainEvent,
    MutationKind,
    Task,
    TaskAssignedEvent,
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskUpdatedEvent,
    assignment_message,
)

from .channel import room_for_user
from .registry import ChannelRegistry

log = structlog.get_logger()


@dataclass(frozen=True)
class MutationOutcome:
    """一次已提交变更的结果

    create/update 携带提交后的 task；delete 只携带 task_id。
    previous_assigned_to_id 为变更前的被分配者（create 时为 None）。
    """

    kind: MutationKind
    task_id: str
    task: Task | None = None
    previous_assigned_to_id: str | None = None

    @classmethod
    def created(cls, task: Task) -> "MutationOutcome":
        return cls(kind=MutationKind.CREATE, task_id=task.id, task=task)

    @classmethod
    def updated(cls, task: Task, previous_assigned_to_id: str | None) -> "MutationOutcome":
        return cls(
            kind=MutationKind.UPDATE,
            task_id=task.id,
            task=task,
            previous_assigned_to_id=previous_assigned_to_id,
        )

    @classmethod
    def deleted(cls, task_id: str) -> "MutationOutcome":
        return cls(kind=MutationKind.DELETE, task_id=task_id)


class EventBroadcaster:
    """事件广播器"""

    def __init__(self, registry: ChannelRegistry) -> None:
        self._registry = registry

    def publish(self, outcome: MutationOutcome) -> list[DomainEvent]:
        """根据变更结果发布事件

        Returns:
            实际发布的事件列表（按发布顺序）
        """
        match outcome.kind:
            case MutationKind.CREATE:
                task = self._require_task(outcome)
                events: list[DomainEvent] = [self.publish_created(task)]
                assigned = self._publish_assignment(task, previous=None)
            case MutationKind.UPDATE:
                task = self._require_task(outcome)
                events = [self.publish_updated(task)]
                assigned = self._publish_assignment(task, outcome.previous_assigned_to_id)
            case MutationKind.DELETE:
                return [self.publish_deleted(outcome.task_id)]

        if assigned is not None:
            events.append(assigned)
        return events

    def publish_created(self, task: Task) -> TaskCreatedEvent:
        event = TaskCreatedEvent(task=task)
        self._broadcast(event, task.id)
        return event

    def publish_updated(self, task: Task) -> TaskUpdatedEvent:
        event = TaskUpdatedEvent(task=task)
        self._broadcast(event, task.id)
        return event

    def publish_deleted(self, task_id: str) -> TaskDeletedEvent:
        event = TaskDeletedEvent(task_id=task_id)
        self._broadcast(event, task_id)
        return event

    def notify_assigned(self, assignee_id: str, task: Task) -> TaskAssignedEvent:
        """向被分配者的 room 定向推送 task:assigned"""
        event = TaskAssignedEvent(
            message=assignment_message(task),
            task=task,
            assignee_id=assignee_id,
        )
        room = room_for_user(assignee_id)
        delivered = self._registry.send_to_room(room, event)
        log.info(
            "event_published",
            event_kind=event.event,
            task_id=task.id,
            room=room,
            delivered=delivered,
        )
        return event

    def _publish_assignment(
        self, task: Task, previous: str | None
    ) -> TaskAssignedEvent | None:
        assignee = task.assigned_to_id
        if assignee is None or assignee == previous:
            return None
        return self.notify_assigned(assignee, task)

    def _broadcast(self, event: DomainEvent, task_id: str) -> None:
        delivered = self._registry.broadcast_all(event)
        log.info(
            "event_published",
            event_kind=event.event,
            task_id=task_id,
            room="*",
            delivered=delivered,
        )

    @staticmethod
    def _require_task(outcome: MutationOutcome) -> Task:
        if outcome.task is None:
            raise ValueError(f"{outcome.kind} outcome requires a task")
        return outcome.task
