"""Wire codec: rencode values through a zlib stream.

One compressed value travels per direction per call. The encoder finalizes
the zlib stream before handing bytes back; the decoder knows a value is
complete when the zlib stream reports its end.
"""

from __future__ import annotations

import zlib
from typing import Any

import rencode

from delugerpc.rpc.values import GenericValue, from_wire, to_generic
from delugerpc.utils.exceptions import CodecError

FLOAT_BITS = 64


def encode(value: Any) -> bytes:
    """Encode one generic value and return the finished zlib stream."""
    wire_value = to_generic(value)
    try:
        raw = rencode.dumps(wire_value, float_bits=FLOAT_BITS)
    except Exception as exc:
        raise CodecError(f"rencode failed to encode value: {exc}") from exc
    compressor = zlib.compressobj()
    return compressor.compress(raw) + compressor.flush(zlib.Z_FINISH)


def decode(data: bytes) -> GenericValue:
    """Decode exactly one complete zlib stream into a generic value."""
    decoder = StreamDecoder()
    if not decoder.feed(data):
        raise CodecError("truncated compressed stream", details={"received_bytes": len(data)})
    if decoder.unused_data:
        raise CodecError("trailing bytes after compressed stream", details={"trailing_bytes": len(decoder.unused_data)})
    return decoder.value()


def _loads(raw: bytes) -> GenericValue:
    if not raw:
        raise CodecError("empty rencode payload")
    try:
        value = rencode.loads(raw, decode_utf8=False)
    except Exception as exc:
        raise CodecError(f"malformed rencode payload: {exc}", details={"payload_bytes": len(raw)}) from exc
    consumed = _encoded_length(value, len(raw))
    if consumed != len(raw):
        raise CodecError(
            "trailing bytes after rencode value",
            details={"payload_bytes": len(raw), "value_bytes": consumed},
        )
    return from_wire(value)


def _encoded_length(value: Any, expected: int) -> int:
    """Length of the canonical encoding of a decoded value.

    rencode.loads stops after the first value and ignores whatever follows, so
    the payload is checked against a re-encoding. Floats may have been sent at
    either width.
    """
    length = 0
    for float_bits in (FLOAT_BITS, 32):
        try:
            length = len(rencode.dumps(value, float_bits=float_bits))
        except Exception as exc:
            raise CodecError(f"malformed rencode payload: {exc}") from exc
        if length == expected:
            break
    return length


class StreamDecoder:
    """Incremental decoder for a single response read off a socket."""

    def __init__(self) -> None:
        self._inflater = zlib.decompressobj()
        self._chunks: list[bytes] = []
        self.received_bytes = 0

    @property
    def complete(self) -> bool:
        return self._inflater.eof

    @property
    def unused_data(self) -> bytes:
        """Bytes received after the end of the zlib stream."""
        return self._inflater.unused_data

    def feed(self, chunk: bytes) -> bool:
        """Feed compressed bytes; return True once the stream has ended."""
        if self.complete:
            raise CodecError("stream already complete")
        self.received_bytes += len(chunk)
        try:
            self._chunks.append(self._inflater.decompress(chunk))
        except zlib.error as exc:
            raise CodecError(f"malformed compressed data: {exc}", details={"received_bytes": self.received_bytes}) from exc
        return self.complete

    def value(self) -> GenericValue:
        if not self.complete:
            raise CodecError("truncated compressed stream", details={"received_bytes": self.received_bytes})
        return _loads(b"".join(self._chunks))
