"""Tests for settings loading: file, environment and override precedence."""

import json
from pathlib import Path

import pytest

from delugerpc.config.loader import camel_to_snake, convert_keys, get_config_path, load_config
from delugerpc.config.schema import ClientSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("DELUGE_HOSTNAME", "DELUGE_PORT", "DELUGE_LOGIN", "DELUGE_PASSWORD", "DELUGE_VERIFY_CERTIFICATE"):
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = load_config(tmp_path / "missing.json")
    assert settings.hostname == "127.0.0.1"
    assert settings.port == 58846
    assert settings.timeout_seconds == 30.0
    assert settings.verify_certificate is True
    assert settings.address == "127.0.0.1:58846"


def test_default_config_path() -> None:
    assert get_config_path() == Path.home() / ".delugerpc" / "config.json"


def test_camel_case_file_keys(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "config.json",
        {"hostname": "seedbox", "timeoutSeconds": 5, "verifyCertificate": False, "caFile": "~/daemon.cert"},
    )
    settings = load_config(path)
    assert settings.hostname == "seedbox"
    assert settings.timeout_seconds == 5.0
    assert settings.verify_certificate is False
    assert settings.ca_path == Path("~/daemon.cert").expanduser()


def test_invalid_json_is_a_value_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(path)


def test_non_object_file_is_a_value_error(tmp_path: Path) -> None:
    path = _write(tmp_path / "config.json", [1, 2])
    with pytest.raises(ValueError, match="must be an object"):
        load_config(path)


def test_invalid_values_are_reported(tmp_path: Path) -> None:
    path = _write(tmp_path / "config.json", {"port": 70000})
    with pytest.raises(ValueError, match="Invalid settings"):
        load_config(path)


def test_overrides_win_over_file(tmp_path: Path) -> None:
    path = _write(tmp_path / "config.json", {"hostname": "seedbox", "port": 1000})
    settings = load_config(path, hostname="other", port=None)
    assert settings.hostname == "other"
    assert settings.port == 1000


def test_environment_fills_gaps(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("DELUGE_PORT", "60000")
    monkeypatch.setenv("DELUGE_HOSTNAME", "from-env")
    path = _write(tmp_path / "config.json", {"hostname": "from-file"})
    settings = load_config(path)
    assert settings.port == 60000
    assert settings.hostname == "from-file"


def test_log_level_is_normalized() -> None:
    assert ClientSettings(log_level="debug").log_level == "DEBUG"


def test_password_is_hidden_from_repr() -> None:
    assert "hunter2" not in repr(ClientSettings(password="hunter2"))


def test_key_conversion() -> None:
    assert camel_to_snake("timeoutSeconds") == "timeout_seconds"
    assert camel_to_snake("port") == "port"
    assert convert_keys({"checkHostname": True}) == {"check_hostname": True}
