"""实时同步层 -- 通道认证、通道注册表、事件广播"""

from .authenticator import SessionAuthenticator, extract_token
from .broadcaster import EventBroadcaster, MutationKind, MutationOutcome
from .channel import Channel, room_for_user
from .registry import ChannelRegistry

__all__ = [
    "Channel",
    "ChannelRegistry",
    "EventBroadcaster",
    "MutationKind",
    "MutationOutcome",
    "SessionAuthenticator",
    "extract_token",
    "room_for_user",
]
