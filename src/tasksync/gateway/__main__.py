"""python -m tasksync.gateway -- 本地启动入口"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "tasksync.gateway.main:app",
        host=os.environ.get("TASKSYNC_HOST", "127.0.0.1"),
        port=int(os.environ.get("TASKSYNC_PORT", "8000")),
        # 空闲连接由 uvicorn 的 WebSocket ping 检测并断开
        ws_ping_interval=20.0,
        ws_ping_timeout=20.0,
        log_config=None,
    )


if __name__ == "__main__":
    main()
