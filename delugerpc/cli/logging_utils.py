"""Loguru helpers for the delugerpc command line."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}


def default_log_dir() -> Path:
    return Path.home() / ".delugerpc" / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO", log_dir: Path | None = None) -> Path:
    """Add a rotating file sink for ``name`` once; later calls reuse it."""
    directory = log_dir or default_log_dir()
    log_path = directory / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    directory.mkdir(parents=True, exist_ok=True)
    _SINK_IDS[name] = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    return log_path


def configure_logging(level: str = "INFO", log_file: str | None = None, verbose: bool = False) -> None:
    """Route loguru to stderr at ``level`` (DEBUG when verbose) plus an optional file sink."""
    effective = "DEBUG" if verbose else level
    logger.remove()
    _SINK_IDS.clear()
    logger.add(sys.stderr, level=effective, backtrace=False, diagnose=False)
    if log_file:
        path = Path(log_file).expanduser()
        ensure_rotating_log_file(path.stem, level=effective, log_dir=path.parent)
