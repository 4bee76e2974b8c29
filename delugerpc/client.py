"""Deluge daemon RPC client.

Typed wrappers around the synchronous RPC engine. A client holds one session;
it is not safe to share between threads without external locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger as default_logger

from delugerpc.config.schema import ClientSettings
from delugerpc.rpc.engine import RpcEngine
from delugerpc.rpc.marshal import (
    decode_mapping,
    decode_nested_mapping,
    decode_optional_text,
    decode_text_list,
    filter_to_dictionary,
    options_to_dictionary,
    scan,
    strings_to_list,
)
from delugerpc.rpc.protocol import RpcResult
from delugerpc.rpc.transport import TransportSession, build_ssl_context
from delugerpc.utils.exceptions import NotConnectedError

Options = Mapping[str, Any]


class DelugeClient:
    """Connection to one Deluge daemon."""

    def __init__(self, settings: ClientSettings | None = None, logger: Any = None):
        self.settings = settings or ClientSettings()
        self.logger = logger or default_logger.bind(daemon=self.settings.address)
        self.session = TransportSession(
            self.settings.hostname,
            self.settings.port,
            timeout=self.settings.timeout_seconds,
            ssl_context=build_ssl_context(
                verify_certificate=self.settings.verify_certificate,
                ca_file=str(self.settings.ca_path) if self.settings.ca_path else None,
                check_hostname=self.settings.check_hostname,
            ),
        )
        self.engine = RpcEngine(self.session, logger=self.logger)

    def __enter__(self) -> "DelugeClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session.connected:
            self.close()

    def __repr__(self) -> str:
        state = "connected" if self.session.connected else "disconnected"
        return f"DelugeClient({self.settings.address}, {state})"

    @property
    def class_id(self) -> int | None:
        """Privilege class the daemon assigned at login."""
        return self.session.class_id

    def connect(self) -> None:
        """Open the TLS connection and log in.

        The session is only usable once login succeeds; on any failure the
        connection is dropped and the client stays disconnected.
        """
        if self.session.connected:
            return
        self.session.connect()
        try:
            result = self.engine.call("daemon.login", [self.settings.login, self.settings.password])
            (class_id,) = scan(result.values, int, field="daemon.login")
        except BaseException:
            self.session.close()
            raise
        self.session.class_id = class_id
        self.logger.info("login successful as user {}", self.settings.login)

    def close(self) -> None:
        """Close the connection; closing twice raises ``AlreadyClosedError``."""
        self.session.close()

    def call(self, method: str, *args: Any, **kwargs: Any) -> RpcResult:
        """Call any daemon method with raw wire arguments."""
        if not self.session.connected:
            raise NotConnectedError(f"call {method}")
        return self.engine.call(method, args, kwargs)

    def methods_list(self) -> list[str]:
        """Return the methods the daemon exposes."""
        result = self.call("daemon.get_method_list")
        (methods,) = scan(result.values, list, field="daemon.get_method_list")
        return decode_text_list(methods, "daemon.get_method_list")

    def daemon_version(self) -> str:
        """Return the running daemon version."""
        (version,) = scan(self.call("daemon.info").values, str, field="daemon.info")
        return version

    def _added_hash(self, method: str, source: str, options: Options | None) -> str:
        result = self.call(method, source, options_to_dictionary(options))
        (torrent_hash,) = scan(result.values, object, field=method)
        # null when the torrent was already added
        return decode_optional_text(torrent_hash, method)

    def add_torrent_magnet(self, magnet_uri: str, options: Options | None = None) -> str:
        """Add a torrent by magnet URI; returns its hash, or "" if already present."""
        return self._added_hash("core.add_torrent_magnet", magnet_uri, options)

    def add_torrent_url(self, url: str, options: Options | None = None) -> str:
        """Add a torrent by URL; returns its hash, or "" if already present."""
        return self._added_hash("core.add_torrent_url", url, options)

    def move_storage(self, torrent_ids: Iterable[str], dest: str) -> None:
        self.call("core.move_storage", strings_to_list(torrent_ids), dest)

    def remove_torrent(self, torrent_id: str, remove_data: bool = False) -> bool:
        result = self.call("core.remove_torrent", torrent_id, remove_data)
        if result.values and isinstance(result.values[0], bool):
            return result.values[0]
        return True

    def get_torrent_status(self, torrent_id: str, keys: Iterable[str] = (), diff: bool = False) -> dict[str, Any]:
        """Status fields of one torrent. An empty key list asks for every field."""
        result = self.call("core.get_torrent_status", torrent_id, strings_to_list(keys), diff)
        (status,) = scan(result.values, dict, field="core.get_torrent_status")
        return decode_mapping(status, "core.get_torrent_status")

    def get_torrents_status(
        self,
        filter: Mapping[str, Iterable[str]] | None = None,
        keys: Iterable[str] = (),
        diff: bool = False,
    ) -> dict[str, dict[str, Any]]:
        """Status fields of every torrent matching ``filter``, keyed by torrent id."""
        filter_dict = filter_to_dictionary(filter)
        self.logger.debug("get_torrents_status filter: {}", filter_dict)
        result = self.call("core.get_torrents_status", filter_dict, strings_to_list(keys), diff)
        (statuses,) = scan(result.values, dict, field="core.get_torrents_status")
        return decode_nested_mapping(statuses, "core.get_torrents_status")

    def get_session_state(self) -> list[str]:
        """Ids of every torrent in the session."""
        (ids,) = scan(self.call("core.get_session_state").values, list, field="core.get_session_state")
        return decode_text_list(ids, "core.get_session_state")
