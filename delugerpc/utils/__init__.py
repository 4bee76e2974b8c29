"""Utility functions for delugerpc."""

from delugerpc.utils.exceptions import (
    DelugeRpcError,
    TransportError,
    TransportTimeoutError,
    NotConnectedError,
    AlreadyClosedError,
    CodecError,
    MarshalError,
    ShapeError,
    CorrelationError,
    RemoteError,
    UnsupportedEventError,
    UnknownMessageTypeError,
    ErrorCategory,
    classify_exception,
)

__all__ = [
    "DelugeRpcError",
    "TransportError",
    "TransportTimeoutError",
    "NotConnectedError",
    "AlreadyClosedError",
    "CodecError",
    "MarshalError",
    "ShapeError",
    "CorrelationError",
    "RemoteError",
    "UnsupportedEventError",
    "UnknownMessageTypeError",
    "ErrorCategory",
    "classify_exception",
]
