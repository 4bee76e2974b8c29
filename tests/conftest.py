"""Pytest hooks and fixtures.

The daemon is simulated with ``socket.socketpair()``: replies are queued on the
daemon end before a call, and requests are read back for assertions.
"""

from __future__ import annotations

import socket
from typing import Any

import pytest

from delugerpc.client import DelugeClient
from delugerpc.config.schema import ClientSettings
from delugerpc.rpc.codec import StreamDecoder, encode
from delugerpc.rpc.protocol import MessageType
from delugerpc.rpc.transport import TransportSession, build_ssl_context


class FakeDaemon:
    """Daemon end of a socket pair."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.sock.settimeout(2.0)

    def send_raw(self, data: bytes) -> None:
        self.sock.sendall(data)

    def reply(self, *values: Any) -> None:
        self.sock.sendall(encode(list(values)))

    def respond(self, request_id: int, *values: Any) -> None:
        self.reply(MessageType.RESPONSE, request_id, *values)

    def fail(self, request_id: int, exception_type: str, message: str, traceback: str) -> None:
        self.reply(MessageType.ERROR, request_id, [exception_type, message, traceback])

    def read_request(self) -> Any:
        decoder = StreamDecoder()
        while True:
            chunk = self.sock.recv(65536)
            if not chunk:
                raise ConnectionError("client closed the connection")
            if decoder.feed(chunk):
                break
        return decoder.value()


@pytest.fixture
def socket_pair():
    client_sock, daemon_sock = socket.socketpair()
    yield client_sock, daemon_sock
    client_sock.close()
    daemon_sock.close()


@pytest.fixture
def daemon(socket_pair) -> FakeDaemon:
    return FakeDaemon(socket_pair[1])


@pytest.fixture
def session(socket_pair, monkeypatch) -> TransportSession:
    sess = TransportSession(
        "daemon.test",
        58846,
        timeout=2.0,
        ssl_context=build_ssl_context(verify_certificate=False),
    )
    monkeypatch.setattr(sess, "_open_socket", lambda: socket_pair[0])
    sess.connect()
    return sess


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        hostname="daemon.test",
        port=58846,
        login="alice",
        password="secret",
        timeout_seconds=2.0,
        verify_certificate=False,
    )


@pytest.fixture
def client(settings, socket_pair, monkeypatch) -> DelugeClient:
    """A client wired to the fake daemon, not yet connected."""
    deluge = DelugeClient(settings)
    monkeypatch.setattr(deluge.session, "_open_socket", lambda: socket_pair[0])
    return deluge


@pytest.fixture
def connected_client(client, daemon) -> DelugeClient:
    daemon.respond(1, 10)
    client.connect()
    daemon.read_request()
    return client
