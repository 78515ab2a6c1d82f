"""ChannelRegistry / Channel 测试

测试内容：
1. admit 加入 user:<id> room，重复 admit 幂等
2. send_to_room 每个成员恰好一份，其他 room 零份
3. remove 清理 room，重复 remove 无副作用
4. 单个通道推送失败不影响其他通道
"""

import pytest
from tasksync.core.models import TaskDeletedEvent
from tasksync.gateway.realtime import Channel, ChannelRegistry, room_for_user


@pytest.fixture
def registry() -> ChannelRegistry:
    return ChannelRegistry()


def _event(task_id: str = "t1") -> TaskDeletedEvent:
    return TaskDeletedEvent(task_id=task_id)


class TestAdmit:
    def test_admit_joins_user_room(self, registry):
        channel = Channel()
        registry.admit(channel, "42")

        assert registry.is_registered(channel)
        assert registry.rooms_of(channel) == {"user:42"}
        assert registry.members_of(room_for_user("42")) == {channel}
        assert channel.user_id == "42"

    def test_admit_is_idempotent(self, registry):
        channel = Channel()
        registry.admit(channel, "42")
        registry.admit(channel, "42")

        assert registry.channel_count == 1
        assert registry.members_of("user:42") == {channel}

    def test_channel_cannot_switch_user(self, registry):
        channel = Channel()
        registry.admit(channel, "42")

        with pytest.raises(ValueError):
            registry.admit(channel, "7")

    def test_unknown_room_is_empty(self, registry):
        assert registry.members_of("user:nobody") == set()


class TestDelivery:
    async def test_room_delivery_exactly_once_per_member(self, registry):
        first, second, other = Channel(), Channel(), Channel()
        registry.admit(first, "42")
        registry.admit(second, "42")
        registry.admit(other, "7")

        delivered = registry.send_to_room("user:42", _event())

        assert delivered == 2
        assert first.pending() == 1
        assert second.pending() == 1
        assert other.pending() == 0
        assert await first.next_event() == _event()

    async def test_broadcast_reaches_every_channel(self, registry):
        channels = [Channel() for _ in range(3)]
        for i, channel in enumerate(channels):
            registry.admit(channel, str(i))

        assert registry.broadcast_all(_event()) == 3
        assert [c.pending() for c in channels] == [1, 1, 1]

    async def test_fifo_within_channel(self, registry):
        channel = Channel()
        registry.admit(channel, "42")

        registry.broadcast_all(_event("a"))
        registry.send_to_room("user:42", _event("b"))
        registry.broadcast_all(_event("c"))

        received = [(await channel.next_event()).task_id for _ in range(3)]
        assert received == ["a", "b", "c"]

    def test_empty_room_has_no_effect(self, registry):
        assert registry.send_to_room("user:nobody", _event()) == 0

    def test_full_queue_is_isolated(self, registry):
        slow = Channel(queue_maxsize=1)
        fast = Channel()
        registry.admit(slow, "1")
        registry.admit(fast, "2")

        assert registry.broadcast_all(_event("a")) == 2
        # slow 队列已满：本次只投递给 fast，且不抛出
        assert registry.broadcast_all(_event("b")) == 1
        assert slow.pending() == 1
        assert fast.pending() == 2


class TestRemove:
    def test_remove_cleans_rooms(self, registry):
        channel = Channel()
        registry.admit(channel, "42")

        registry.remove(channel)

        assert not registry.is_registered(channel)
        assert registry.members_of("user:42") == set()
        assert registry.rooms_of(channel) == set()
        assert registry.channel_count == 0
        assert channel.closed

    def test_remove_keeps_other_members(self, registry):
        first, second = Channel(), Channel()
        registry.admit(first, "42")
        registry.admit(second, "42")

        registry.remove(first)

        assert registry.members_of("user:42") == {second}

    def test_remove_twice_is_noop(self, registry):
        channel = Channel()
        registry.admit(channel, "42")
        registry.remove(channel)
        registry.remove(channel)

        assert registry.channel_count == 0

    def test_removed_channel_receives_nothing(self, registry):
        channel = Channel()
        registry.admit(channel, "42")
        registry.remove(channel)

        assert registry.broadcast_all(_event()) == 0
        assert channel.pending() == 0
