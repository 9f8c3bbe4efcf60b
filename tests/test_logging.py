"""
Tests for logging setup.
"""
import logging
from typing import Iterator

import pytest
import structlog
from pythonjsonlogger import jsonlogger

from order_pipeline.config import Settings
from order_pipeline.monitoring import setup_logging


@pytest.fixture
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
@pytest.mark.usefixtures("restore_logging")
def test_single_json_handler_at_configured_level(test_settings: Settings) -> None:
    setup_logging(test_settings.model_copy(update={"log_level": "WARNING"}))
    setup_logging(test_settings.model_copy(update={"log_level": "WARNING"}))

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    assert root.level == logging.WARNING


@pytest.mark.unit
@pytest.mark.usefixtures("restore_logging")
def test_debug_uses_console_renderer(test_settings: Settings) -> None:
    setup_logging(test_settings.model_copy(update={"debug": True}))

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
