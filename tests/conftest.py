"""Pytest configuration for all tests."""

import io

import pytest

from daydev_utils.core import logging as daylog
from daydev_utils.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings():
    """Reload settings for every test so env patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def log_stream() -> io.StringIO:
    """In-memory stream for capturing logger output."""
    return io.StringIO()


@pytest.fixture
def production_logger(log_stream):
    """JSON logger writing to ``log_stream``, installed as the global logger."""
    logger = daylog.new_production(stream=log_stream)
    restore = daylog.replace_globals(logger)
    yield logger
    restore()
