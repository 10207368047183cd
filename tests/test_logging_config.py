from __future__ import annotations

import logging

import pytest

from ramenviz.logging_config import resolve_level, setup_logging


def test_resolve_level_accepts_names_and_numbers() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError):
        resolve_level("loud")


def test_setup_logging_is_idempotent(tmp_path) -> None:
    log_file = tmp_path / "ramenviz.log"
    setup_logging("debug", log_file=str(log_file))
    setup_logging("debug", log_file=str(log_file))

    logger = logging.getLogger("ramenviz")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("ramenviz.model.formats").debug("hello from the parser")
    for handler in logger.handlers:
        handler.flush()
    assert "hello from the parser" in log_file.read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logging.getLogger("py.warnings").handlers.clear()
    logging.captureWarnings(False)
