"""Tests for logging setup."""

import logging

import pytest

from src.logging_config import APP_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def _restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_app_loggers_follow_level():
    configure_logging("DEBUG")

    for name in APP_LOGGERS:
        assert logging.getLogger(name).level == logging.DEBUG
    assert len(logging.getLogger().handlers) == 1
    assert logging.getLogger().handlers[0].level == logging.DEBUG


def test_third_party_quieted():
    configure_logging("DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.pool").level == logging.ERROR
