"""
Pytest configuration and fixtures for networker tests.
"""

import logging

import pytest
import responses as responses_lib

from networker import Networker, NetworkerConfig
from networker.core.config import CacheConfig, RetryConfig
from networker.core.logging import LoggingConfig, NetworkLogger, clear_correlation_id


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def config(base_url):
    """Config without retry delay, so retry tests run instantly."""
    return NetworkerConfig(
        base_url=base_url,
        retry=RetryConfig(max_retries=2, delay=0),
        cache=CacheConfig(enabled=False),
    )


@pytest.fixture
def networker(config):
    """Networker instance for testing."""
    networker = Networker(config)
    yield networker
    networker.close()


@pytest.fixture
def logging_config():
    """LoggingConfig that writes only through propagation (caplog sees it)."""
    return LoggingConfig.create(level="DEBUG", enable_console=False)


@pytest.fixture
def network_logger(logging_config):
    logger = NetworkLogger(logging_config, name="networker.test")
    yield logger
    logger.close()


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture
def caplog_networker(caplog):
    """caplog capturing everything under the networker logger tree."""
    caplog.set_level(logging.DEBUG, logger="networker")
    return caplog
