"""ChannelRegistry -- 内存中的在线通道表 + 按用户分组的 room

进程内唯一的可变共享结构，只通过 admit/remove 修改。
所有方法都不包含 await，在单个事件循环线程内即为一个临界区。
推送失败按通道吞掉并记录日志，一个通道失败不影响其他通道。
"""

import structlog
from tasksync.core.exceptions import TransientDeliveryFailure
from tasksync.core.models import DomainEvent

from .channel import Channel, room_for_user

log = structlog.get_logger()


class ChannelRegistry:
    """通道注册表"""

    def __init__(self) -> None:
        # channel_id -> Channel
        self._channels: dict[str, Channel] = {}
        # room key -> set of channel_id
        self._rooms: dict[str, set[str]] = {}

    @property
    def channel_count(self) -> int:
        return len(self._channels)

    def admit(self, channel: Channel, user_id: str) -> None:
        """登记通道并加入 room user:<user_id>

        同一物理通道重复准入是幂等的（重连竞态）。

        Raises:
            ValueError: 通道已绑定到其他用户
        """
        channel.bind_user(user_id)
        room = room_for_user(user_id)

        self._channels[channel.channel_id] = channel
        self._rooms.setdefault(room, set()).add(channel.channel_id)
        channel.rooms.add(room)

        log.info(
            "channel_admitted",
            channel_id=channel.channel_id,
            user_id=user_id,
            room=room,
        )

    def remove(self, channel: Channel) -> None:
        """注销通道并退出所有 room；重复移除不报错"""
        channel.close()
        if self._channels.pop(channel.channel_id, None) is None:
            return

        for room in channel.rooms:
            members = self._rooms.get(room)
            if members is None:
                continue
            members.discard(channel.channel_id)
            if not members:
                del self._rooms[room]
        channel.rooms.clear()

        log.info(
            "channel_removed",
            channel_id=channel.channel_id,
            user_id=channel.user_id,
        )

    def members_of(self, room_key: str) -> set[Channel]:
        """返回 room 内的在线通道（副本）；room 不存在时返回空集合"""
        return {
            self._channels[channel_id]
            for channel_id in self._rooms.get(room_key, set())
            if channel_id in self._channels
        }

    def rooms_of(self, channel: Channel) -> set[str]:
        """返回通道所在的 room；未登记的通道返回空集合"""
        if channel.channel_id not in self._channels:
            return set()
        return set(channel.rooms)

    def is_registered(self, channel: Channel) -> bool:
        return channel.channel_id in self._channels

    def broadcast_all(self, event: DomainEvent) -> int:
        """推送给所有已登记通道

        Returns:
            成功入队的通道数
        """
        return self._deliver(list(self._channels.values()), event)

    def send_to_room(self, room_key: str, event: DomainEvent) -> int:
        """推送给指定 room 内的通道；空 room 无任何效果

        Returns:
            成功入队的通道数
        """
        return self._deliver(list(self.members_of(room_key)), event)

    def _deliver(self, channels: list[Channel], event: DomainEvent) -> int:
        delivered = 0
        for channel in channels:
            try:
                channel.push(event)
                delivered += 1
            except TransientDeliveryFailure as e:
                log.warning(
                    "channel_delivery_failed",
                    channel_id=e.channel_id,
                    reason=e.reason,
                    event_kind=event.event,
                )
        return delivered
