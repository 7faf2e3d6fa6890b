"""Shared test fixtures for all test modules."""

import pytest

from netscrapy.core.config import NetworkScraperConfig
from netscrapy.core.scraper import NetworkScraper
from tests.fakes import FakeStatSource, eth0_counters, eth1_counters


@pytest.fixture
def source() -> FakeStatSource:
    """Fake stat source with eth0 and eth1 and no connections."""
    return FakeStatSource(io=[eth0_counters(), eth1_counters()])


@pytest.fixture
def make_scraper(source: FakeStatSource):
    """Factory fixture building an un-started scraper over the fake source."""

    def _make(config: NetworkScraperConfig | None = None) -> NetworkScraper:
        return NetworkScraper(config or NetworkScraperConfig(), source)

    return _make


@pytest.fixture
async def started_scraper(make_scraper) -> NetworkScraper:
    """Scraper with default config, already started."""
    scraper = make_scraper()
    await scraper.start()
    return scraper
