"""
Shared fixtures for the Startup Tracker tests.
"""

from unittest.mock import AsyncMock

import pytest

from startup_tracker.config import (
    Config,
    DatabaseConfig,
    DirectorySourceConfig,
    PortfolioSourceConfig,
    ProxyConfig,
    ScrapingConfig,
    SourcesConfig,
)
from startup_tracker.database.connection import create_database_engine, create_session_factory, init_db
from startup_tracker.scrapers.linkedin import LinkedInResolver


@pytest.fixture
def scraping_config():
    return ScrapingConfig(
        requests_per_second=1000,
        retry_delay=2.0,
        page_retry_delay=0,
        max_retries=3,
        max_consecutive_errors=3,
    )


@pytest.fixture
def config(scraping_config, tmp_path):
    return Config(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'test.db'}"),
        scraping=scraping_config,
        proxy=ProxyConfig(enabled=False),
        sources=SourcesConfig(
            portfolio=PortfolioSourceConfig(urls=["https://portfolio.test/"]),
            directory=DirectorySourceConfig(api_url="https://directory.test/companies", batches=["W24"]),
        ),
    )


@pytest.fixture
def fake_http():
    """Stand-in for HTTPClientManager; tests set fetch_text / fetch_json behaviour."""
    client = AsyncMock()
    client.get_stats = lambda: {}
    return client


@pytest.fixture
def linkedin():
    return LinkedInResolver()


@pytest.fixture
def session_factory(config):
    engine = create_database_engine(config.database)
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()
