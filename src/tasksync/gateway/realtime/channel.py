"""Channel -- 单个已认证的双向连接

每个通道持有一个有界 asyncio.Queue 作为出站缓冲，保证同一通道内按发布顺序投递（FIFO）。
user_id 在准入时绑定一次，之后不可变。
"""

import asyncio

from tasksync.core.config import get_channel_queue_maxsize
from tasksync.core.exceptions import TransientDeliveryFailure
from tasksync.core.models import DomainEvent
from ulid import ULID


def room_for_user(user_id: str) -> str:
    """用户专属 room 的 key"""
    return f"user:{user_id}"


class Channel:
    """实时通道"""

    def __init__(
        self,
        channel_id: str | None = None,
        queue_maxsize: int | None = None,
    ) -> None:
        self.channel_id = channel_id or str(ULID())
        self.rooms: set[str] = set()
        self._user_id: str | None = None
        self._closed = False
        maxsize = queue_maxsize if queue_maxsize is not None else get_channel_queue_maxsize()
        self._queue: asyncio.Queue[DomainEvent] = asyncio.Queue(maxsize=maxsize)

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def closed(self) -> bool:
        return self._closed

    def bind_user(self, user_id: str) -> None:
        """绑定所属用户；同一用户重复绑定是幂等的

        Raises:
            ValueError: 通道已绑定到其他用户
        """
        if self._user_id is not None and self._user_id != user_id:
            raise ValueError(
                f"channel {self.channel_id} already bound to user {self._user_id}"
            )
        self._user_id = user_id

    def push(self, event: DomainEvent) -> None:
        """将事件放入出站队列（非阻塞）

        Raises:
            TransientDeliveryFailure: 通道已关闭或队列已满
        """
        if self._closed:
            raise TransientDeliveryFailure(self.channel_id, "channel closed")
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull as e:
            raise TransientDeliveryFailure(self.channel_id, "queue full") from e

    async def next_event(self) -> DomainEvent:
        """等待并取出下一个待发送事件"""
        return await self._queue.get()

    def pending(self) -> int:
        """队列中尚未发送的事件数"""
        return self._queue.qsize()

    def close(self) -> None:
        self._closed = True

    def __repr__(self) -> str:
        return f"Channel(channel_id={self.channel_id!r}, user_id={self._user_id!r})"
