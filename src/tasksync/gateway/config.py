"""GatewayConfig -- Gateway 配置加载

从环境变量加载配置，非法数值不阻塞启动，回退默认值并记录告警。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr
from tasksync.core.auth.tokens import DEFAULT_EXPIRES_IN_S

log = structlog.get_logger()

# 仅用于本地开发，生产环境必须通过 TASKSYNC_JWT_SECRET 覆盖
DEV_JWT_SECRET = "tasksync-dev-secret-change-me"


class GatewayConfig(BaseModel):
    """Gateway 配置 -- 从环境变量加载

    环境变量:
        TASKSYNC_JWT_SECRET: token 签名密钥
        TASKSYNC_JWT_EXPIRES_IN_S: token 有效期（秒，默认 7 天）
        TASKSYNC_CORS_ORIGINS: 允许的前端来源，逗号分隔
    """

    jwt_secret: SecretStr = Field(
        default=SecretStr(DEV_JWT_SECRET),
        description="token 签名密钥",
    )
    jwt_expires_in_s: int = Field(
        default=DEFAULT_EXPIRES_IN_S,
        ge=1,
        description="token 有效期（秒）",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="允许跨域访问的来源",
    )


def load_gateway_config() -> GatewayConfig:
    """从环境变量加载 Gateway 配置

    Returns:
        GatewayConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKSYNC_JWT_SECRET"):
        kwargs["jwt_secret"] = SecretStr(val)
    else:
        log.warning(
            "jwt_secret_not_configured",
            env_var="TASKSYNC_JWT_SECRET",
            message="使用开发默认密钥，切勿用于生产环境",
        )

    if val := os.environ.get("TASKSYNC_JWT_EXPIRES_IN_S"):
        try:
            kwargs["jwt_expires_in_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_expires_config",
                env_var="TASKSYNC_JWT_EXPIRES_IN_S",
                value=val,
                fallback=DEFAULT_EXPIRES_IN_S,
            )

    if val := os.environ.get("TASKSYNC_CORS_ORIGINS"):
        kwargs["cors_origins"] = [o.strip() for o in val.split(",") if o.strip()]

    return GatewayConfig(**kwargs)
