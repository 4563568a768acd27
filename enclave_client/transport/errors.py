from typing import Any, Optional


class EnclaveError(Exception):
    """Enclave客户端错误基类"""
    pass


class TransportError(EnclaveError):
    """网络/连接错误，不会自动重试"""
    pass


class ProtocolError(EnclaveError):
    """非成功HTTP状态码"""
    def __init__(self, status_code: int, body: str, reply: Any = None):
        self.status_code = status_code
        self.body = body
        # 尽力解析出的结构化响应，解析失败时为None
        self.reply = reply
        super().__init__(f"response: status={status_code}, body={body}")

    @property
    def error_message(self) -> Optional[str]:
        """结构化错误信息（如果能够解析）"""
        return getattr(self.reply, "error", None) or None


class DecodeError(EnclaveError):
    """JSON解析失败"""
    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"failed to decode json. Input: {text}, err: {reason}")


class EmptyResponseBodyError(EnclaveError):
    """成功状态码但响应体为空"""
    def __init__(self, message: str = "response body is empty"):
        super().__init__(message)


class RateLimitTimeoutError(EnclaveError):
    """等待速率限制令牌超时，请求未发送"""
    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"rate limiter wait exceeded {timeout}s, request not sent")


class ApiRequestError(EnclaveError):
    """端点调用在传输层失败"""
    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"error with http request to {operation}: {message}")

    @property
    def status_code(self) -> Optional[int]:
        cause = self.__cause__
        return cause.status_code if isinstance(cause, ProtocolError) else None


class UnsuccessfulResponseError(EnclaveError):
    """响应信封中 success=false"""
    def __init__(self, operation: str, response: Any, detail: Optional[str] = None):
        self.operation = operation
        self.response = response
        error = getattr(response, "error", "")
        target = f"{operation} {detail}" if detail else operation
        super().__init__(f"error in {target}: {error}")
