"""异常处理器 -- 统一错误响应格式

所有错误响应体: {"error": {"code": ..., "message": ...}}
请求体校验失败额外携带 details: [{"field", "message"}]，状态码 400。
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from tasksync.core.exceptions import TaskSyncError, ValidationError

log = structlog.get_logger()


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[dict[str, str]] | None = None,
) -> JSONResponse:
    """构造统一格式的错误响应"""
    error: dict = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def _format_location(loc: tuple) -> str:
    # 去掉 body/query/path 前缀，只保留字段路径
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def _handle_tasksync_error(request: Request, exc: TaskSyncError) -> JSONResponse:
    details = exc.details if isinstance(exc, ValidationError) else None
    if exc.status_code >= 500:
        log.error("request_failed", code=exc.code, error=exc.message)
    return error_response(exc.status_code, exc.code, exc.message, details)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"field": _format_location(tuple(err.get("loc", ()))), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return error_response(400, ValidationError.code, "Validation failed", details)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_exception", error_type=type(exc).__name__)
    return error_response(500, "INTERNAL_ERROR", "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""
    app.add_exception_handler(TaskSyncError, _handle_tasksync_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
