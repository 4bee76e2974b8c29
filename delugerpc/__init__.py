"""
delugerpc - client for the Deluge daemon RPC protocol
"""

__version__ = "0.1.0"
__logo__ = "🌊"

from delugerpc.client import DelugeClient
from delugerpc.config.schema import ClientSettings
from delugerpc.utils.exceptions import (
    AlreadyClosedError,
    CodecError,
    CorrelationError,
    DelugeRpcError,
    RemoteError,
    TransportError,
    TransportTimeoutError,
    UnknownMessageTypeError,
    UnsupportedEventError,
)

__all__ = [
    "__version__",
    "DelugeClient",
    "ClientSettings",
    "AlreadyClosedError",
    "CodecError",
    "CorrelationError",
    "DelugeRpcError",
    "RemoteError",
    "TransportError",
    "TransportTimeoutError",
    "UnknownMessageTypeError",
    "UnsupportedEventError",
]
