"""Tests for root logger setup."""

import logging

import pytest

from eventarc_publisher.logging import configure_logging


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_configure_logging_sets_level(clean_root):
    configure_logging("debug")
    assert clean_root.level == logging.DEBUG
    assert logging.getLogger("google.auth").level == logging.WARNING


def test_configure_logging_writes_file(clean_root, tmp_path):
    log_file = tmp_path / "publish.log"
    configure_logging("INFO", log_file=str(log_file))
    logging.getLogger("eventarc_publisher.test").info("hello file")
    for handler in clean_root.handlers:
        handler.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")
