"""TLS transport session for the Deluge daemon.

A session owns exactly one connection and the call serial counter. It is not
thread-safe: one call may be in flight at a time, and callers that want
concurrent calls open one session per thread (or guard a shared session with
their own lock).
"""

from __future__ import annotations

import socket
import ssl
import time

from loguru import logger

from delugerpc.rpc.codec import StreamDecoder
from delugerpc.rpc.protocol import MAX_SERIAL
from delugerpc.rpc.values import GenericValue
from delugerpc.utils.exceptions import (
    AlreadyClosedError,
    CodecError,
    NotConnectedError,
    TransportError,
    TransportTimeoutError,
)

DEFAULT_PORT = 58846
DEFAULT_TIMEOUT_SECONDS = 30.0
RECV_CHUNK_SIZE = 64 * 1024


def build_ssl_context(
    *,
    verify_certificate: bool = True,
    ca_file: str | None = None,
    check_hostname: bool = False,
) -> ssl.SSLContext:
    """Build the client TLS context.

    Verification is on unless explicitly disabled. Deluge daemons generate a
    self-signed certificate, so a verifying client usually passes that
    certificate as ``ca_file`` and leaves ``check_hostname`` off.
    """
    if not verify_certificate:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context
    try:
        context = ssl.create_default_context(cafile=ca_file)
    except OSError as exc:
        raise TransportError(f"cannot load CA file {ca_file}: {exc}", details={"ca_file": ca_file}) from exc
    context.check_hostname = check_hostname
    return context


class TransportSession:
    """One TLS connection to ``hostname:port`` with a sliding per-call deadline."""

    def __init__(
        self,
        hostname: str,
        port: int = DEFAULT_PORT,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        ssl_context: ssl.SSLContext | None = None,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.hostname = hostname
        self.port = port
        self.timeout = timeout
        self.ssl_context = ssl_context or build_ssl_context()
        self.serial = 0
        self.class_id: int | None = None
        self._sock: socket.socket | None = None
        self._deadline: float | None = None
        self._backlog = b""

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """Open the TCP connection and complete the TLS handshake."""
        if self._sock is not None:
            return
        if self.ssl_context.verify_mode == ssl.CERT_NONE:
            logger.warning("TLS certificate verification is disabled for {}", self.address)
        self.reset_deadline()
        try:
            self._sock = self._open_socket()
        except socket.timeout as exc:
            raise TransportTimeoutError("connect", self.timeout) from exc
        except OSError as exc:
            raise TransportError(
                f"connect to {self.address} failed: {exc}",
                details={"address": self.address},
            ) from exc
        self._backlog = b""
        logger.info("Connected to {}", self.address)

    def _open_socket(self) -> socket.socket:
        raw = socket.create_connection((self.hostname, self.port), timeout=self._remaining("connect"))
        try:
            return self.ssl_context.wrap_socket(raw, server_hostname=self.hostname)
        except BaseException:
            raw.close()
            raise

    def close(self) -> None:
        """Close the connection; a second close raises ``AlreadyClosedError``."""
        if self._sock is None:
            raise AlreadyClosedError()
        sock, self._sock = self._sock, None
        self._backlog = b""
        self._deadline = None
        self.class_id = None
        try:
            sock.close()
        except OSError as exc:
            raise TransportError(f"close failed: {exc}", details={"address": self.address}) from exc
        logger.debug("Closed connection to {}", self.address)

    def next_serial(self) -> int:
        """Advance the serial counter; wraps to 1 just before the int64 maximum."""
        self.serial += 1
        if self.serial == MAX_SERIAL:
            self.serial = 1
        return self.serial

    def reset_deadline(self) -> None:
        """Start a fresh read/write window of ``timeout`` seconds from now."""
        self._deadline = time.monotonic() + self.timeout

    def _remaining(self, operation: str) -> float:
        if self._deadline is None:
            self.reset_deadline()
        assert self._deadline is not None
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise TransportTimeoutError(operation, self.timeout)
        return remaining

    def _require(self, operation: str) -> socket.socket:
        if self._sock is None:
            raise NotConnectedError(operation)
        return self._sock

    def send(self, payload: bytes) -> int:
        """Write the whole payload before the current deadline."""
        sock = self._require("send")
        try:
            sock.settimeout(self._remaining("write"))
            sock.sendall(payload)
        except socket.timeout as exc:
            raise TransportTimeoutError("write", self.timeout) from exc
        except OSError as exc:
            raise TransportError(f"write to {self.address} failed: {exc}", details={"address": self.address}) from exc
        return len(payload)

    def _recv(self, sock: socket.socket) -> bytes:
        try:
            sock.settimeout(self._remaining("read"))
            return sock.recv(RECV_CHUNK_SIZE)
        except socket.timeout as exc:
            raise TransportTimeoutError("read", self.timeout) from exc
        except OSError as exc:
            raise TransportError(f"read from {self.address} failed: {exc}", details={"address": self.address}) from exc

    def receive_value(self) -> GenericValue:
        """Read exactly one compressed value off the connection."""
        sock = self._require("receive")
        decoder = StreamDecoder()
        pending, self._backlog = self._backlog, b""
        while not (pending and decoder.feed(pending)):
            pending = self._recv(sock)
            if pending:
                continue
            if decoder.received_bytes == 0:
                raise TransportError("connection closed by daemon", details={"address": self.address})
            raise CodecError(
                "truncated compressed stream: connection closed mid-response",
                details={"received_bytes": decoder.received_bytes},
            )
        if decoder.unused_data:
            logger.warning("{} bytes received past the end of the response; kept for the next read", len(decoder.unused_data))
            self._backlog = decoder.unused_data
        return decoder.value()
