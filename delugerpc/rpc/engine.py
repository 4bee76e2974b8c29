"""Synchronous request/response engine.

Each call is one full round trip: serial, envelope, encode, send, receive,
decode, correlate, classify. A second call must not start until the first has
returned; the protocol has no multiplexing beyond the echoed serial.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from loguru import logger as default_logger

from delugerpc.rpc import codec
from delugerpc.rpc.classifier import classify_response
from delugerpc.rpc.protocol import CallEnvelope, MessageType, RpcFailure, RpcResult, unpack_envelope
from delugerpc.rpc.transport import TransportSession
from delugerpc.rpc.values import to_generic
from delugerpc.utils.exceptions import CorrelationError, DelugeRpcError, RemoteError


class CallState(str, Enum):
    """Where the engine is in the current (or last) call."""

    IDLE = "idle"
    SENDING = "sending"
    AWAITING_RESPONSE = "awaiting-response"
    SUCCESS = "success"
    REMOTE_ERROR = "remote-error"
    FATAL = "fatal"


class RpcEngine:
    """Drives calls over a ``TransportSession``. Not safe for concurrent use."""

    def __init__(self, session: TransportSession, logger: Any = None):
        self.session = session
        self.logger = logger or default_logger
        self.state = CallState.IDLE

    def call(
        self,
        method: str,
        args: Sequence[Any] | None = None,
        kwargs: Mapping[str, Any] | None = None,
    ) -> RpcResult:
        """Perform one call and return its result.

        Raises ``RemoteError`` when the daemon rejects the call; transport,
        codec, correlation and message-type failures propagate as raised.
        """
        self.state = CallState.IDLE
        # bad arguments fail here, before a serial is spent
        wire_args = to_generic(list(args or []), "args")
        wire_kwargs = to_generic(dict(kwargs or {}), "kwargs")

        serial = self.session.next_serial()
        request = CallEnvelope(serial=serial, method=method, args=wire_args, kwargs=wire_kwargs)
        try:
            payload = codec.encode(request.to_wire())
            self.logger.debug("flushed zlib buffer: {} bytes for {}", len(payload), method)

            self.state = CallState.SENDING
            self.session.reset_deadline()
            written = self.session.send(payload)
            self.logger.debug("written {} bytes to RPC connection", written)

            self.session.reset_deadline()
            self.state = CallState.AWAITING_RESPONSE
            response = unpack_envelope(self.session.receive_value())
            if response.message_type != MessageType.EVENT and response.request_id != serial:
                raise CorrelationError(serial, response.request_id)
            outcome = classify_response(response)
        except DelugeRpcError:
            self.state = CallState.FATAL
            raise

        self.logger.debug("RPC({}) = {}", method, outcome)
        if isinstance(outcome, RpcFailure):
            self.state = CallState.REMOTE_ERROR
            raise RemoteError(
                outcome.exception_type,
                outcome.exception_message,
                outcome.traceback,
                request_id=outcome.request_id,
            )
        self.state = CallState.SUCCESS
        return outcome
