"""TaskSync Client -- 乐观更新 + 实时事件合并的本地任务缓存"""

from .api import HttpTaskApi, TaskApi
from .cache import PendingMutation, TaskCache
from .sync import SyncController

__all__ = [
    "HttpTaskApi",
    "TaskApi",
    "PendingMutation",
    "TaskCache",
    "SyncController",
]
