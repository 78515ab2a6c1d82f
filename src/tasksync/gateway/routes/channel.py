"""实时事件通道 -- WebSocket /ws/channel

握手时校验 token（query `token` 或 Authorization: Bearer），失败时在 accept 之前
以 1008 + "unauthorized" 关闭，不登记任何 room。
准入后每个连接一个发送协程，从 Channel 队列按序取事件推送；
客户端上行消息被忽略。连接断开只停止投递，不影响进行中的变更。
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from tasksync.core.exceptions import AuthenticationError
from tasksync.core.models import event_to_wire

from ..deps import get_channel_registry, get_token_service
from ..realtime import Channel, SessionAuthenticator, extract_token

log = structlog.get_logger()

router = APIRouter()


async def _pump_events(websocket: WebSocket, channel: Channel) -> None:
    """按入队顺序把事件发给客户端"""
    while True:
        event = await channel.next_event()
        await websocket.send_json(event_to_wire(event))


async def _drain_incoming(websocket: WebSocket) -> None:
    """读取并丢弃上行消息，直到客户端断开"""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/ws/channel")
async def event_channel(
    websocket: WebSocket,
    registry=Depends(get_channel_registry),
    token_service=Depends(get_token_service),
):
    authenticator = SessionAuthenticator(token_service)
    try:
        claims = authenticator.authenticate(extract_token(websocket))
    except AuthenticationError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="unauthorized")
        return

    channel = Channel()
    structlog.contextvars.bind_contextvars(
        channel_id=channel.channel_id, user_id=claims.user_id
    )
    # 先登记再 accept：客户端看到连接建立时已经能收到事件
    registry.admit(channel, claims.user_id)
    try:
        await websocket.accept()
        sender = asyncio.create_task(_pump_events(websocket, channel))
        receiver = asyncio.create_task(_drain_incoming(websocket))
        try:
            await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sender, receiver):
                task.cancel()
            results = await asyncio.gather(sender, receiver, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception) and not isinstance(
                    result, WebSocketDisconnect
                ):
                    log.warning(
                        "channel_closed_with_error",
                        error=str(result),
                        error_type=type(result).__name__,
                    )
    finally:
        registry.remove(channel)
        structlog.contextvars.unbind_contextvars("channel_id", "user_id")
