"""
Pytest configuration and fixtures for http-middleware-core tests.
"""

import pytest

from http_middleware.cache import InMemorySwrCache
from http_middleware.core.logging.config import LoggingConfig

from helpers import BASE_URL, FakeTransport


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return BASE_URL


@pytest.fixture
def transport():
    """Fake terminal transport answering 200 ``ok``."""
    return FakeTransport()


@pytest.fixture
def cache():
    return InMemorySwrCache()


@pytest.fixture
def logging_config():
    """LoggingConfig without console output (handlers stay quiet in tests)."""
    return LoggingConfig.create(level="DEBUG", enable_console=False)


@pytest.fixture
def logging_config_with_file(tmp_path):
    """LoggingConfig writing to a temporary file."""
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "test.log"),
    )
