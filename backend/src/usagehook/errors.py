"""Failure taxonomy for usage hook dispatch."""
from typing import Any


class ErrorCode:
    """Machine-readable codes carried by dispatch failures."""

    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    TRANSPORT = "transport"


class DispatchError(Exception):
    """Base class for a failed usage hook request."""

    code: str = "dispatch_error"


class DispatchTimeout(DispatchError):
    """The request did not complete before the deadline and was cancelled."""

    code = ErrorCode.TIMEOUT

    def __init__(self, timeout_seconds: float | None = None):
        super().__init__("Timeout")
        self.timeout_seconds = timeout_seconds


class HttpStatusError(DispatchError):
    """The endpoint answered with a non-2xx status."""

    code = ErrorCode.HTTP_STATUS

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class TransportError(DispatchError):
    """Connection-level failure (DNS, refused, reset).

    The underlying exception is kept unmodified in ``cause``.
    """

    code = ErrorCode.TRANSPORT

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
        self.__cause__ = cause

    def details(self) -> dict[str, Any]:
        return {"error_type": type(self.cause).__name__, "error": str(self.cause)}
