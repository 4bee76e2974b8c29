from pathlib import Path

from loguru import logger

from delugerpc.cli import logging_utils


def test_rotating_file_sink_added_once(tmp_path: Path) -> None:
    try:
        first = logging_utils.ensure_rotating_log_file("client", log_dir=tmp_path)
        second = logging_utils.ensure_rotating_log_file("client", log_dir=tmp_path)
        assert first == second == tmp_path / "client.log"
        assert list(logging_utils._SINK_IDS) == ["client"]
        logger.info("hello from the test")
        assert "hello from the test" in first.read_text(encoding="utf-8")
    finally:
        for sink_id in logging_utils._SINK_IDS.values():
            logger.remove(sink_id)
        logging_utils._SINK_IDS.clear()
