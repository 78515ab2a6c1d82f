"""TaskSync -- 多用户任务跟踪 + 实时同步"""

__version__ = "0.1.0"
