"""
Exception hierarchy for delugerpc.

Provides:
- Custom exception classes with error codes
- Error categorization (recoverable, timeout, validation, fatal)
- Classification helper separating transport failures from remote logical failures
"""

from __future__ import annotations

import socket
import ssl
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    FATAL = "fatal"
    VALIDATION = "validation"
    TIMEOUT = "timeout"


class DelugeRpcError(Exception):
    """Base exception for all delugerpc errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportError(DelugeRpcError):
    """Connect, TLS, write or read failure on the daemon connection."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRANSPORT_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, category=category, details=details)


class TransportTimeoutError(TransportError):
    """A socket operation did not finish before the per-call deadline."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"Operation '{operation}' timed out after {timeout_seconds}s",
            code="TRANSPORT_TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )


class NotConnectedError(TransportError):
    """An operation was attempted on a session without a live connection."""

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation}: not connected to the daemon",
            code="NOT_CONNECTED",
            details={"operation": operation},
        )


class AlreadyClosedError(DelugeRpcError):
    """The session connection was already closed."""

    def __init__(self) -> None:
        super().__init__(
            "connection is already closed",
            code="ALREADY_CLOSED",
            category=ErrorCategory.RECOVERABLE,
        )


class CodecError(DelugeRpcError):
    """Malformed compressed data or a malformed/truncated encoded value."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "CODEC_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, category=category, details=details)


class MarshalError(CodecError):
    """A native value cannot be represented on the wire."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message, code="MARSHAL_ERROR", category=ErrorCategory.VALIDATION, details=details)


class ShapeError(CodecError):
    """A decoded value does not have the shape the reader declared."""

    def __init__(self, field: str, expected: str, actual: Any):
        super().__init__(
            f"{field}: expected {expected}, got {type(actual).__name__}",
            code="SHAPE_ERROR",
            category=ErrorCategory.VALIDATION,
            details={"field": field, "expected": expected, "actual": type(actual).__name__},
        )


class CorrelationError(DelugeRpcError):
    """The response does not echo the serial id of the request just sent."""

    def __init__(self, expected: int, received: Any):
        super().__init__(
            f"request/response serial id mismatch: sent {expected}, received {received!r}",
            code="CORRELATION_ERROR",
            details={"expected": expected, "received": received},
        )


class RemoteError(DelugeRpcError):
    """The daemon understood the call and rejected it."""

    def __init__(self, exception_type: str, exception_message: str, traceback: str, request_id: int | None = None):
        self.exception_type = exception_type
        self.exception_message = exception_message
        self.traceback = traceback
        self.request_id = request_id
        super().__init__(
            f"{exception_type}('{exception_message}')\n{traceback}",
            code="REMOTE_ERROR",
            category=ErrorCategory.RECOVERABLE,
            details={
                "exception_type": exception_type,
                "exception_message": exception_message,
                "request_id": request_id,
            },
        )

    def __str__(self) -> str:
        return self.message


class UnsupportedEventError(DelugeRpcError):
    """The daemon pushed an event notification on the synchronous channel."""

    def __init__(self, event_name: str | None = None):
        label = event_name or "<unknown>"
        super().__init__(
            f"event support not available (received event {label})",
            code="UNSUPPORTED_EVENT",
            details={"event_name": event_name},
        )


class UnknownMessageTypeError(DelugeRpcError):
    """The response envelope carries an unrecognized message type tag."""

    def __init__(self, message_type: Any):
        super().__init__(
            f"unknown message type: {message_type!r}",
            code="UNKNOWN_MESSAGE_TYPE",
            details={"message_type": message_type},
        )


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    The core never retries; ``should_retry`` only reports whether a fresh
    session could reasonably attempt the call again.
    """
    if isinstance(exc, DelugeRpcError):
        return exc.code, exc.category, isinstance(exc, TransportError) and not isinstance(exc, NotConnectedError)

    if isinstance(exc, socket.timeout):
        return "TRANSPORT_TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ssl.SSLError):
        return "TLS_ERROR", ErrorCategory.FATAL, False

    if isinstance(exc, ConnectionError):
        return "TRANSPORT_ERROR", ErrorCategory.FATAL, True

    if isinstance(exc, (ValueError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False
