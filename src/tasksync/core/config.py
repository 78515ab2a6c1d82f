"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、通道队列上限、任务标题长度等可配置常量。
"""

import os
from pathlib import Path

import structlog

log = structlog.get_logger()

DEFAULT_CHANNEL_QUEUE_MAXSIZE = 100


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKSYNC_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKSYNC_DB_PATH",
        str(_get_base_dir() / "sqlite" / "tasksync.db"),
    )


def get_channel_queue_maxsize() -> int:
    """获取单个实时通道的出站队列上限（满时丢弃该通道的新事件）

    非法值（非整数或小于 1）回退默认值并记录告警。
    """
    val = os.environ.get("TASKSYNC_CHANNEL_QUEUE_MAXSIZE")
    if not val:
        return DEFAULT_CHANNEL_QUEUE_MAXSIZE
    try:
        maxsize = int(val)
    except ValueError:
        maxsize = 0
    if maxsize < 1:
        log.warning(
            "invalid_channel_queue_config",
            env_var="TASKSYNC_CHANNEL_QUEUE_MAXSIZE",
            value=val,
            fallback=DEFAULT_CHANNEL_QUEUE_MAXSIZE,
        )
        return DEFAULT_CHANNEL_QUEUE_MAXSIZE
    return maxsize


# 任务标题最大长度
TASK_TITLE_MAX_LENGTH: int = 100

# 用户名长度范围
USER_NAME_MIN_LENGTH: int = 2
USER_NAME_MAX_LENGTH: int = 50

# 密码最小长度
PASSWORD_MIN_LENGTH: int = 8
