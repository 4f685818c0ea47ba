"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在会话完成回调或上层 UI 做统一捕获与友好提示。

流式场景下的错误分层：
- TransportError: 网络失败、非 2xx、连接被重置，经 on_complete 回调交给调用方。
- MalformedEventError: 单行 JSON 解析失败，仅记录日志，不会终止会话。
- 数据不完整（半个 UTF-8 字符 / 半行 JSON）不算错误，留在缓冲区等待下一个分片。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_READ_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、line 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class TransportError(BusinessError):
    """传输层错误的公共父类，经会话完成回调向上传递。"""


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时、连接被重置等。"""


class ApiError(TransportError):
    """第三方 API 返回非 2xx/429 错误时抛出。"""


class RateLimitError(TransportError):
    """Provider 限流错误，由上层负责重试/退避策略。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class MalformedEventError(BusinessError):
    """流式响应中的某一行无法解析为合法事件。

    只在行级别记录，不会让整个会话失败。
    """


class SessionStateError(BusinessError):
    """在不允许的状态下操作 StreamSession（例如重复 start）。"""


class ConversationError(BusinessError):
    """会话上传服务返回了无法识别的结果。"""
