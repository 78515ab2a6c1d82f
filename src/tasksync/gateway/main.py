"""FastAPI 应用主文件

app 创建 + lifespan 管理（组合根）：
- 启动：加载配置，初始化 Store / TokenService / ChannelRegistry / EventBroadcaster
- 关闭：关闭数据库连接
所有共享实例挂在 app.state 上，通过 deps 注入。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tasksync.core.auth import TokenService
from tasksync.core.config import get_db_path
from tasksync.core.store import create_store_group

from .config import load_gateway_config
from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .realtime import ChannelRegistry, EventBroadcaster
from .routes import auth, channel, health, tasks, users

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时组装依赖，关闭时清理连接"""
    gateway_config = app.state.gateway_config

    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    app.state.token_service = TokenService(
        secret=gateway_config.jwt_secret.get_secret_value(),
        expires_in_s=gateway_config.jwt_expires_in_s,
    )

    # 进程内唯一的通道注册表，广播器持有其引用
    registry = ChannelRegistry()
    app.state.channel_registry = registry
    app.state.broadcaster = EventBroadcaster(registry)

    log.info("gateway_started", db_path=get_db_path())

    yield

    # 关闭：清理数据库连接
    if getattr(app.state, "store_group", None):
        await app.state.store_group.conn.close()
    log.info("gateway_stopped")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    setup_logging()
    gateway_config = load_gateway_config()

    app = FastAPI(
        title="TaskSync Gateway",
        version="0.1.0",
        description="TaskSync 协作任务管理 API + 实时事件通道",
        lifespan=lifespan,
    )
    app.state.gateway_config = gateway_config

    # 注册中间件（顺序：先 Trace 后 Logging，CORS 最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=gateway_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    setup_logfire(app)
    register_exception_handlers(app)

    # 注册路由
    app.include_router(auth.router, tags=["auth"])
    app.include_router(users.router, tags=["users"])
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(channel.router, tags=["channel"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
