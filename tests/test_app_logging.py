"""Tests for logging configuration."""

import logging

from cafe_log.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("cafe_log")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_levels() -> None:
    configure_logging("production")

    assert logging.getLogger("cafe_log").level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("local")

    assert logging.getLogger("cafe_log").level == logging.DEBUG
