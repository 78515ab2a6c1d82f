"""依赖注入模块 -- 通过 FastAPI Depends 注入组合根中创建的实例

StoreGroup / TokenService / ChannelRegistry / EventBroadcaster 在 lifespan 中创建，
挂在 app.state 上；路由只通过这里取用，不存在全局单例查找。
HTTPConnection 同时覆盖 HTTP 请求和 WebSocket 握手。
"""

from starlette.requests import HTTPConnection
from tasksync.core.auth import TokenService
from tasksync.core.store import StoreGroup

from .realtime import ChannelRegistry, EventBroadcaster


def get_store_group(connection: HTTPConnection) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return connection.app.state.store_group


def get_token_service(connection: HTTPConnection) -> TokenService:
    """从 app.state 获取 TokenService 实例"""
    return connection.app.state.token_service


def get_channel_registry(connection: HTTPConnection) -> ChannelRegistry:
    """从 app.state 获取 ChannelRegistry 实例"""
    return connection.app.state.channel_registry


def get_broadcaster(connection: HTTPConnection) -> EventBroadcaster:
    """从 app.state 获取 EventBroadcaster 实例"""
    return connection.app.state.broadcaster
