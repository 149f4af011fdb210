"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
便于在控制器层或 UI 层做统一捕获与用户提示。

传输层错误统一为 TransportError，按 kind 区分：
- network: 连接失败、DNS、超时等。
- protocol: 服务端返回非 2xx 状态码，detail 中保留状态码与响应体。
- malformed: 状态码正常，但响应体缺少 answer 字段。
"""

from typing import Literal


TransportErrorKind = Literal["network", "protocol", "malformed"]

GENERIC_ERROR_TEXT = "Sorry, I encountered an error. Please try again."
NETWORK_ERROR_TEXT = "Network error. Please check your internet connection and try again."


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "EMPTY_USER_ID"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 session_id 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ValidationError(BusinessError):
    """参数校验失败，例如开始会话时 user id 为空。"""


class TransportError(BusinessError):
    """ChatTransport 调用失败的基类。

    控制器对三种 kind 一视同仁地写入历史，
    detail 仅用于日志诊断，不直接展示给用户。
    """

    kind: TransportErrorKind = "network"

    def __init__(self, code: str, message: str, detail: str = "", http_status: int = 502, **extra):
        super().__init__(code=code, message=message, http_status=http_status, **extra)
        self.detail = detail or message


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时等。"""

    kind: TransportErrorKind = "network"


class ApiError(TransportError):
    """接口返回非 2xx 状态码时抛出。"""

    kind: TransportErrorKind = "protocol"


class MalformedResponseError(TransportError):
    """响应成功但缺少 answer 字段或不是合法 JSON。"""

    kind: TransportErrorKind = "malformed"


def describe_error(exc: BaseException) -> str:
    """把异常转换为可直接追加到对话历史的提示文本。"""

    if isinstance(exc, NetworkError):
        return NETWORK_ERROR_TEXT
    if isinstance(exc, ApiError):
        return f"API Error: HTTP error! status: {exc.http_status}"
    if isinstance(exc, MalformedResponseError):
        return "API Error: No answer received from API"
    if isinstance(exc, TransportError):
        return f"API Error: {exc.message}"
    return GENERIC_ERROR_TEXT
