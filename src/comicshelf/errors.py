from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# PUBLIC_INTERFACE
class ErrorKind(str, Enum):
    """Closed set of failure kinds raised by the remote-operation façade."""

    INVALID_ARGUMENT = "InvalidArgument"
    TIMEOUT = "Timeout"
    UNREACHABLE = "Unreachable"
    MALFORMED_RESPONSE = "MalformedResponse"
    EMPTY_RESPONSE = "EmptyResponse"
    INVALID_RESPONSE = "InvalidResponse"
    REMOTE_ERROR = "RemoteError"
    STORE_ERROR = "StoreError"
    UPLOAD_FAILED = "UploadFailed"


# PUBLIC_INTERFACE
class ComicsError(Exception):
    """
    Base error for every failure the façade classifies.

    Callers branch on `kind` instead of matching message text.
    """

    kind: ErrorKind

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} (cause: {self.cause})"


class InvalidArgument(ComicsError):
    """Caller input failed a precondition checked before any network call."""

    kind = ErrorKind.INVALID_ARGUMENT


class Timeout(ComicsError):
    """A wrapped call did not settle within its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, timeout_ms: int, label: str) -> None:
        super().__init__(f"Timed out after {timeout_ms}ms ({label})")
        self.timeout_ms = timeout_ms
        self.label = label


class Unreachable(ComicsError):
    kind = ErrorKind.UNREACHABLE


class MalformedResponse(ComicsError):
    kind = ErrorKind.MALFORMED_RESPONSE


class EmptyResponse(ComicsError):
    kind = ErrorKind.EMPTY_RESPONSE


class InvalidResponse(ComicsError):
    kind = ErrorKind.INVALID_RESPONSE


class RemoteError(ComicsError):
    """The remote function explicitly reported an error."""

    kind = ErrorKind.REMOTE_ERROR


class StoreError(ComicsError):
    """
    The document store answered with a failure status.

    `code` and `message` are passed through from the store unmodified.
    """

    kind = ErrorKind.STORE_ERROR

    def __init__(self, code: int, message: str, error_type: Optional[str] = None, body: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.error_type = error_type
        self.body = body

    @property
    def not_found(self) -> bool:
        return self.code == 404

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class UploadFailed(ComicsError):
    """The media host rejected or failed the upload."""

    kind = ErrorKind.UPLOAD_FAILED
