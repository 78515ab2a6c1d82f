"""core 配置常量测试"""

import pytest
from tasksync.core.config import (
    DEFAULT_CHANNEL_QUEUE_MAXSIZE,
    get_channel_queue_maxsize,
    get_db_path,
)


class TestCoreConfig:
    def test_db_path_default_under_data_dir(self, monkeypatch):
        monkeypatch.delenv("TASKSYNC_DB_PATH", raising=False)
        monkeypatch.setenv("TASKSYNC_DATA_DIR", "/srv/tasksync")

        assert get_db_path() == "/srv/tasksync/sqlite/tasksync.db"

    def test_db_path_override(self, monkeypatch):
        monkeypatch.setenv("TASKSYNC_DB_PATH", "/tmp/x.db")

        assert get_db_path() == "/tmp/x.db"

    def test_channel_queue_maxsize(self, monkeypatch):
        monkeypatch.delenv("TASKSYNC_CHANNEL_QUEUE_MAXSIZE", raising=False)
        assert get_channel_queue_maxsize() == 100

        monkeypatch.setenv("TASKSYNC_CHANNEL_QUEUE_MAXSIZE", "5")
        assert get_channel_queue_maxsize() == 5

    @pytest.mark.parametrize("value", ["lots", "0", "-3"])
    def test_invalid_channel_queue_maxsize_falls_back(self, monkeypatch, value):
        monkeypatch.setenv("TASKSYNC_CHANNEL_QUEUE_MAXSIZE", value)

        assert get_channel_queue_maxsize() == DEFAULT_CHANNEL_QUEUE_MAXSIZE
