from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from fetchxml.logging_config import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_jsonl_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "fetchxml.jsonl"
    configure_logging(level="debug", log_file=log_file, jsonl=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RotatingFileHandler)
    assert isinstance(root.handlers[0].formatter, JsonFormatter)

    logging.getLogger("fetchxml.test").info("parsed %s", "account")
    root.handlers[0].flush()
    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["level"] == "INFO"
    assert record["logger"] == "fetchxml.test"
    assert record["message"] == "parsed account"


def test_unknown_level_falls_back_to_warning():
    configure_logging(level="chatty")
    assert logging.getLogger().level == logging.WARNING
