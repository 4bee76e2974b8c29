"""Response classification: success, remote error, or protocol violation."""

from __future__ import annotations

from typing import Any

from delugerpc.rpc.marshal import decode_text, scan
from delugerpc.rpc.protocol import MessageType, ResponseEnvelope, RpcFailure, RpcResult
from delugerpc.utils.exceptions import ShapeError, UnknownMessageTypeError, UnsupportedEventError


def _event_name(payload: list[Any]) -> str | None:
    if not payload:
        return None
    try:
        return decode_text(payload[0], "event name")
    except ShapeError:
        return None


def classify_response(envelope: ResponseEnvelope) -> RpcResult | RpcFailure:
    """Turn a header-split envelope into a result or failure.

    Events raise ``UnsupportedEventError`` whatever their payload; unknown tags
    raise ``UnknownMessageTypeError``.
    """
    if envelope.message_type == MessageType.EVENT:
        raise UnsupportedEventError(_event_name(envelope.payload))
    if envelope.request_id is None:
        raise ShapeError("response envelope", "request id", None)

    if envelope.message_type == MessageType.RESPONSE:
        return RpcResult(request_id=envelope.request_id, values=envelope.payload)

    if envelope.message_type == MessageType.ERROR:
        (error_list,) = scan(envelope.payload, list, field="error payload")
        exception_type, exception_message, traceback = scan(error_list, str, str, str, field="error payload[0]")
        return RpcFailure(
            request_id=envelope.request_id,
            exception_type=exception_type,
            exception_message=exception_message,
            traceback=traceback,
        )

    raise UnknownMessageTypeError(envelope.message_type)
