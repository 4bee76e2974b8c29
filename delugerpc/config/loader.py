"""Configuration loading utilities."""

import json
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from delugerpc.config.schema import ClientSettings

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".delugerpc" / "config.json"


def load_config(config_path: Path | None = None, **overrides: Any) -> ClientSettings:
    """
    Load connection settings from file, falling back to defaults.

    Precedence, highest first: ``overrides`` (e.g. CLI flags), the file,
    ``DELUGE_*`` environment variables, built-in defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.
        overrides: Field values that win over everything else; ``None`` values are ignored.

    Returns:
        Validated settings.
    """
    path = config_path or get_config_path()
    data: dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"Failed to load config from {path}: top-level value must be an object")
        data = convert_keys(raw)

    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ClientSettings(**data)
    except ValidationError as e:
        raise ValueError(
            f"Invalid settings (config file {path}): {e}. "
            "Fix the file or remove it to use defaults."
        ) from e


def convert_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Convert top-level camelCase keys (``timeoutSeconds``) to snake_case."""
    return {camel_to_snake(k): v for k, v in data.items()}


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()
