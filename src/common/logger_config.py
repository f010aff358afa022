# src/common/logger_config.py
"""Application-wide logging configuration."""

import logging

from rich.logging import RichHandler

from src.common.config.settings import settings

# Delivery results are logged from the publisher's worker threads
WEBHOOK_DELIVERY_LOGGER = "src.inventory_webhooks_domain.infrastructure.publishers"
QUIET_LIBRARY_LOGGERS = ("mysql.connector", "requests", "urllib3", "concurrent.futures")


def _level_from_name(level_name: str, default: int) -> int:
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else default


def setup_logging() -> None:
    """
    Installs a single RichHandler on the root logger at LOG_LEVEL.

    Webhook delivery logging follows WEBHOOK_LOG_LEVEL, so per-subscriber results
    can be silenced or traced independently of stock mutations.
    """
    log_level = _level_from_name(settings.LOG_LEVEL, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,  # Payload slugs and URLs may contain square brackets
        rich_tracebacks=True,
        tracebacks_suppress=[logging],
    )
    root_logger.handlers = [rich_handler]

    logging.getLogger(WEBHOOK_DELIVERY_LOGGER).setLevel(
        _level_from_name(settings.WEBHOOK_LOG_LEVEL, log_level)
    )
    for library_logger in QUIET_LIBRARY_LOGGERS:
        logging.getLogger(library_logger).setLevel(logging.WARNING)
