"""CLI tests with the daemon client replaced by a recording fake."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from delugerpc.cli import commands
from delugerpc.client import DelugeClient
from delugerpc.utils.exceptions import RemoteError, TransportError

runner = CliRunner()


class FakeClient:
    instances: list["FakeClient"] = []
    fail_with: Exception | None = None

    def __init__(self, settings):
        self.settings = settings
        self.calls: list[tuple] = []
        self.closed = False
        FakeClient.instances.append(self)

    def __enter__(self):
        if FakeClient.fail_with is not None:
            raise FakeClient.fail_with
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    @property
    def class_id(self):
        return 10

    def daemon_version(self):
        return "2.1.1"

    def methods_list(self):
        return ["daemon.info", "core.add_torrent_url"]

    def get_session_state(self):
        return []

    def get_torrent_status(self, torrent_id, keys):
        self.calls.append(("status", torrent_id, keys))
        return {"name": "ubuntu.iso", "progress": 42.5}

    def add_torrent_magnet(self, uri, options):
        self.calls.append(("magnet", uri, options))
        return "c9fe"

    def add_torrent_url(self, url, options):
        self.calls.append(("url", url, options))
        return ""

    def remove_torrent(self, torrent_id, remove_data):
        self.calls.append(("remove", torrent_id, remove_data))
        return True

    def move_storage(self, torrent_ids, dest):
        self.calls.append(("move", list(torrent_ids), dest))


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    FakeClient.instances = []
    FakeClient.fail_with = None
    monkeypatch.setattr(commands, "DelugeClient", FakeClient)
    monkeypatch.setattr(commands, "configure_logging", lambda *args, **kwargs: None)
    for name in ("DELUGE_HOSTNAME", "DELUGE_PORT", "DELUGE_VERIFY_CERTIFICATE"):
        monkeypatch.delenv(name, raising=False)
    return FakeClient


def _invoke(tmp_path: Path, *args: str):
    return runner.invoke(commands.app, ["--config", str(tmp_path / "missing.json"), *args])


def test_version() -> None:
    result = runner.invoke(commands.app, ["--version"])
    assert result.exit_code == 0
    assert "delugerpc v" in result.stdout


def test_info_uses_flag_overrides(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "--host", "seedbox", "--port", "60000", "--insecure", "info")
    assert result.exit_code == 0
    assert "Version: 2.1.1" in result.stdout
    assert "Login class: 10" in result.stdout
    settings = FakeClient.instances[0].settings
    assert settings.address == "seedbox:60000"
    assert settings.verify_certificate is False
    assert FakeClient.instances[0].closed


def test_methods_are_sorted(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "methods")
    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["core.add_torrent_url", "daemon.info"]


def test_empty_session(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "session")
    assert result.exit_code == 0
    assert "No torrents." in result.stdout


def test_status_passes_keys(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "status", "h1", "-k", "name", "-k", "progress")
    assert result.exit_code == 0
    assert FakeClient.instances[0].calls == [("status", "h1", ["name", "progress"])]
    assert "ubuntu.iso" in result.stdout


def test_add_magnet_with_options(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "add", "magnet:?xt=urn:btih:c9fe", "-o", "add_paused=true", "-o", "max_connections=5")
    assert result.exit_code == 0
    assert "Added c9fe" in result.stdout
    assert FakeClient.instances[0].calls == [
        ("magnet", "magnet:?xt=urn:btih:c9fe", {"add_paused": True, "max_connections": 5})
    ]


def test_add_url_already_present(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "add", "http://example.test/a.torrent")
    assert result.exit_code == 0
    assert "already present" in result.stdout
    assert FakeClient.instances[0].calls[0][0] == "url"


def test_add_rejects_bad_option(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "add", "magnet:?xt=urn:btih:c9fe", "-o", "novalue")
    assert result.exit_code != 0
    assert FakeClient.instances == []


def test_remove_and_move(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "remove", "h1", "--remove-data")
    assert result.exit_code == 0
    assert FakeClient.instances[0].calls == [("remove", "h1", True)]

    result = _invoke(tmp_path, "move", "h1", "h2", "--dest", "/data/done")
    assert result.exit_code == 0
    assert FakeClient.instances[1].calls == [("move", ["h1", "h2"], "/data/done")]


def test_remote_error_exits_nonzero(tmp_path: Path) -> None:
    FakeClient.fail_with = RemoteError("BadLoginError", "Password does not match", "")
    result = _invoke(tmp_path, "info")
    assert result.exit_code == 1
    assert "daemon rejected the call: BadLoginError: Password does not match" in result.stdout


def test_transport_error_exits_nonzero(tmp_path: Path) -> None:
    FakeClient.fail_with = TransportError("connect to seedbox:58846 failed: refused")
    result = _invoke(tmp_path, "methods")
    assert result.exit_code == 1
    assert "TRANSPORT_ERROR" in result.stdout


def test_invalid_config_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[]", encoding="utf-8")
    result = runner.invoke(commands.app, ["--config", str(path), "info"])
    assert result.exit_code == 1
    assert FakeClient.instances == []


def test_option_that_is_not_a_number_stays_text(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "add", "magnet:?xt=urn:btih:c9fe", "-o", "label=--5")
    assert result.exit_code == 0
    assert FakeClient.instances[0].calls[0][2] == {"label": "--5"}


def test_missing_ca_file_reports_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(commands, "DelugeClient", DelugeClient)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"caFile": str(tmp_path / "missing.pem")}), encoding="utf-8")
    result = runner.invoke(commands.app, ["--config", str(path), "info"])
    assert result.exit_code == 1
    assert "cannot load CA file" in result.stdout
