# tests/test_common/test_logger_config.py
"""Tests for the rich logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from src.common.config.settings import settings
from src.common.logger_config import QUIET_LIBRARY_LOGGERS, WEBHOOK_DELIVERY_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging mutates global loggers; put them back after each test."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    touched = [WEBHOOK_DELIVERY_LOGGER, *QUIET_LIBRARY_LOGGERS]
    saved_levels = {name: logging.getLogger(name).level for name in touched}
    yield
    root_logger.handlers = saved_handlers
    root_logger.setLevel(saved_level)
    for name, level in saved_levels.items():
        logging.getLogger(name).setLevel(level)


def test_setup_logging_installs_single_rich_handler(mocker) -> None:
    mocker.patch.object(settings, "LOG_LEVEL", "debug")
    mocker.patch.object(settings, "WEBHOOK_LOG_LEVEL", "DEBUG")

    setup_logging()
    setup_logging()

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0], RichHandler)


def test_setup_logging_sets_webhook_delivery_level_separately(mocker) -> None:
    mocker.patch.object(settings, "LOG_LEVEL", "INFO")
    mocker.patch.object(settings, "WEBHOOK_LOG_LEVEL", "ERROR")

    setup_logging()

    assert logging.getLogger(WEBHOOK_DELIVERY_LOGGER).level == logging.ERROR
    publisher_logger = logging.getLogger(f"{WEBHOOK_DELIVERY_LOGGER}.http_webhook_publisher")
    assert publisher_logger.getEffectiveLevel() == logging.ERROR
    assert logging.getLogger("src.inventory_webhooks_domain.application").getEffectiveLevel() == logging.INFO


def test_setup_logging_falls_back_on_unknown_levels(mocker) -> None:
    mocker.patch.object(settings, "LOG_LEVEL", "verbose")
    mocker.patch.object(settings, "WEBHOOK_LOG_LEVEL", "chatty")

    setup_logging()

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger(WEBHOOK_DELIVERY_LOGGER).level == logging.INFO
    for library_logger in QUIET_LIBRARY_LOGGERS:
        assert logging.getLogger(library_logger).level == logging.WARNING
