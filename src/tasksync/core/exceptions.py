"""TaskSync 异常体系

请求路径上的错误统一继承 TaskSyncError，携带机器可读的 code 和对应的 HTTP 状态码，
由 gateway 的异常处理器渲染为 {"error": {"code", "message"}}，
客户端再按状态码映射回同一组异常类。
"""


class TaskSyncError(Exception):
    """TaskSync 基础异常"""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str, code: str | None = None) -> None:
        """
        Args:
            message: 错误描述（会原样返回给调用方，不得包含敏感信息）
            code: 覆盖默认错误码
        """
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class AuthenticationError(TaskSyncError):
    """身份认证失败：token 缺失、无效或过期

    对外只暴露通用信息，避免成为 token 有效性的探测接口。
    """

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "unauthorized") -> None:
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Token 签名或有效期校验失败（TokenService.verify 抛出）"""

    code = "INVALID_TOKEN"

    def __init__(self, message: str = "invalid or expired token") -> None:
        super().__init__(message)


class AuthorizationError(TaskSyncError):
    """操作者无权执行该变更"""

    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(TaskSyncError):
    """引用的记录不存在"""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(TaskSyncError):
    """唯一性冲突（例如邮箱已注册）"""

    code = "CONFLICT"
    status_code = 409


class ValidationError(TaskSyncError):
    """变更 payload 不合法，在写入存储之前被拒绝"""

    code = "VALIDATION_FAILED"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        details: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or []


class TransientDeliveryFailure(TaskSyncError):
    """单个通道推送失败（队列已满或通道正在关闭）

    只记录日志并吞掉，不重试，也不会传播给发起变更的调用方。
    """

    code = "DELIVERY_FAILED"

    def __init__(self, channel_id: str, reason: str) -> None:
        super().__init__(f"delivery to channel {channel_id} failed: {reason}")
        self.channel_id = channel_id
        self.reason = reason


class RequestFailedError(TaskSyncError):
    """客户端请求失败（连接错误、超时或无法识别的服务端响应）"""

    code = "REQUEST_FAILED"
    status_code = 502

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error
