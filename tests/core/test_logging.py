from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from vocab_drill.core import logging as core_logging


def _marked(logger: logging.Logger, marker: str) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, marker, False)]


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "vocab_drill.test",
        log_dir=log_dir,
        level="INFO",
        filename="test.log",
    )

    logger.info("hello world", extra={"category": "numbers", "score": 1.5})
    logger.debug("filtered out")

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={"items": [Path(log_dir), 1], "obj": _Helper()},
        )
    core_logging.close_logger(logger)

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2

    first = json.loads(lines[0])
    assert first["message"] == "hello world"
    assert first["level"] == "INFO"
    assert first["logger"] == "vocab_drill.test"
    assert first["extra"] == {"category": "numbers", "score": 1.5}

    last = json.loads(lines[-1])
    assert "ValueError: boom" in last["exception"]
    assert last["extra"]["obj"] == "helper"
    assert last["extra"]["items"] == [str(log_dir), 1]


def test_json_formatter_keeps_unicode():
    record = logging.LogRecord(
        "vocab_drill.test", logging.INFO, __file__, 1, "word %s", ("犬",), None
    )

    payload = json.loads(core_logging.JsonLogFormatter().format(record))

    assert payload["message"] == "word 犬"
    assert "extra" not in payload


def test_verbose_adds_console_handler_and_debug_level(tmp_path):
    logger, _ = core_logging.configure_logger(
        "vocab_drill.test_verbose",
        log_dir=tmp_path / "logs",
        level="WARNING",
        verbose=True,
        filename="verbose.log",
    )

    assert len(_marked(logger, "_vocab_drill_console")) == 1
    (file_handler,) = _marked(logger, "_vocab_drill_file")
    assert file_handler.level == logging.DEBUG

    core_logging.close_logger(logger)
    assert logger.handlers == []


def test_repeated_configuration_reuses_handlers(tmp_path):
    name = "vocab_drill.test_toggle"
    log_dir = tmp_path / "logs"

    logger, _ = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(_marked(logger, "_vocab_drill_console")) == 1
    assert len(_marked(logger, "_vocab_drill_file")) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=False, filename="toggle.log"
    )
    assert _marked(logger, "_vocab_drill_console") == []

    core_logging.close_logger(logger)


def test_unknown_level_defaults_to_info(tmp_path):
    logger, _ = core_logging.configure_logger(
        "vocab_drill.test_level",
        log_dir=tmp_path / "logs",
        level="chatty",
        filename="level.log",
    )

    (file_handler,) = _marked(logger, "_vocab_drill_file")
    assert file_handler.level == logging.INFO

    core_logging.close_logger(logger)


def test_default_filename_uses_logger_leaf(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "vocab_drill.quiz", log_dir=tmp_path / "logs"
    )

    assert log_path == tmp_path / "logs" / "quiz.log"

    core_logging.close_logger(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch):
    target = tmp_path / "blocked"
    fallback = tmp_path / "fallback"
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    logger, log_path = core_logging.configure_logger(
        "vocab_drill.test_blocked",
        log_dir=target,
        filename="blocked.log",
    )

    assert log_path.parent == fallback
    assert log_path.exists()

    core_logging.close_logger(logger)


def test_fallback_log_dir_uses_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))

    assert core_logging._fallback_log_dir() == tmp_path / "vocab-drill-logs"
