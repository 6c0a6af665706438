"""
Pytest configuration file for sol-crawler tests
"""

import logging

import pytest
from click.testing import CliRunner

from sol_crawler.config import CrawlerConfig

from .fakes import new_address


@pytest.fixture
def runner():
    """Create a CLI runner for testing"""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """The CLI reconfigures the package logger, undo that between tests"""
    yield
    package_logger = logging.getLogger('sol_crawler')
    package_logger.handlers = []
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fast_config() -> CrawlerConfig:
    """Crawler config without retry sleeps"""
    return CrawlerConfig(
        fetch_retry_delay=0.0,
        list_retry_delay=0.0,
        empty_page_retry_delay=0.0,
        extract_workers=4,
    )


@pytest.fixture
def target() -> str:
    """A valid address to crawl"""
    return new_address()
