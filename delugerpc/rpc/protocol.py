"""RPC envelope models for the Deluge daemon protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from delugerpc.rpc.values import GenericValue, type_summary
from delugerpc.utils.exceptions import ShapeError

MAX_SERIAL = 2**63 - 1


class MessageType(IntEnum):
    """Message type tag, the first element of every response envelope."""

    RESPONSE = 1
    ERROR = 2
    EVENT = 3


@dataclass(slots=True)
class CallEnvelope:
    """One method call. The wire carries a batch of calls; this client sends one."""

    serial: int
    method: str
    args: list[GenericValue] = field(default_factory=list)
    kwargs: dict[str, GenericValue] = field(default_factory=dict)

    def to_wire(self) -> list[Any]:
        return [[self.serial, self.method, self.args, self.kwargs]]


@dataclass(slots=True)
class ResponseEnvelope:
    """Header-split response: tag, echoed serial (None for events) and payload."""

    message_type: int
    request_id: int | None
    payload: list[GenericValue]


@dataclass(slots=True)
class RpcResult:
    """Successful call: the list of return values."""

    request_id: int
    values: list[GenericValue]

    def __str__(self) -> str:
        return f"{len(self.values)} return values [{type_summary(self.values)}]"


@dataclass(slots=True)
class RpcFailure:
    """Call rejected by the daemon."""

    request_id: int
    exception_type: str
    exception_message: str
    traceback: str

    @property
    def message(self) -> str:
        return f"{self.exception_type}('{self.exception_message}')\n{self.traceback}"

    def __str__(self) -> str:
        return f"RPC error {self.message}"


def unpack_envelope(values: Any) -> ResponseEnvelope:
    """Split a decoded response into header and payload.

    Events are recognized from the tag alone; their second element is the event
    name, not a serial id.
    """
    if not isinstance(values, list) or not values:
        raise ShapeError("response envelope", "non-empty list", values)
    message_type = values[0]
    if not isinstance(message_type, int) or isinstance(message_type, bool):
        raise ShapeError("response envelope[0]", "int message type", message_type)
    if message_type == MessageType.EVENT:
        return ResponseEnvelope(message_type=message_type, request_id=None, payload=list(values[1:]))
    if len(values) < 2:
        raise ShapeError("response envelope", "message type and request id", values)
    request_id = values[1]
    if not isinstance(request_id, int) or isinstance(request_id, bool):
        raise ShapeError("response envelope[1]", "int request id", request_id)
    return ResponseEnvelope(message_type=message_type, request_id=request_id, payload=list(values[2:]))
