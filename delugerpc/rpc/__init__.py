"""Deluge RPC core: codec, marshaling, transport, engine and classification."""

from .classifier import classify_response
from .codec import StreamDecoder, decode, encode
from .engine import CallState, RpcEngine
from .marshal import (
    decode_mapping,
    decode_nested_mapping,
    decode_optional_text,
    decode_text,
    decode_text_list,
    filter_to_dictionary,
    options_to_dictionary,
    scan,
    strings_to_list,
)
from .protocol import CallEnvelope, MessageType, ResponseEnvelope, RpcFailure, RpcResult, unpack_envelope
from .transport import TransportSession, build_ssl_context

__all__ = [
    "CallEnvelope",
    "CallState",
    "MessageType",
    "ResponseEnvelope",
    "RpcEngine",
    "RpcFailure",
    "RpcResult",
    "StreamDecoder",
    "TransportSession",
    "build_ssl_context",
    "classify_response",
    "decode",
    "decode_mapping",
    "decode_nested_mapping",
    "decode_optional_text",
    "decode_text",
    "decode_text_list",
    "encode",
    "filter_to_dictionary",
    "options_to_dictionary",
    "scan",
    "strings_to_list",
    "unpack_envelope",
]
