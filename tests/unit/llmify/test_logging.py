from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from llmify.logging import LOGGER_NAME, setup_logging


@pytest.fixture
def restore_llmify_logger() -> Iterator[None]:
    yield
    std_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(std_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            std_logger.removeHandler(handler)
            handler.close()
    setup_logging()


@pytest.mark.unit
@pytest.mark.usefixtures("restore_llmify_logger")
def test_setup_logging_writes_json_lines_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "llmify.log"

    log = setup_logging(log_file, verbose=True)
    log.debug("exclude", path="a.log", reason="matched_ignore")

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["event"] == "exclude"
    assert record["level"] == "debug"
    assert record["path"] == "a.log"
    assert "timestamp" in record


@pytest.mark.unit
@pytest.mark.usefixtures("restore_llmify_logger")
def test_setup_logging_level_follows_verbose() -> None:
    setup_logging(verbose=True)
    assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG

    setup_logging()
    assert logging.getLogger(LOGGER_NAME).level == logging.INFO
