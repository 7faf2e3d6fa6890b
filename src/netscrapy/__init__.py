"""netscrapy: host network statistics scraper.

Samples interface IO counters, TCP connection states, conntrack usage and
UDP protocol counters into immutable metrics snapshots.
"""

from netscrapy.adapters.controller import ScrapeController
from netscrapy.adapters.psutil_source import PsutilStatSource, create_network_scraper
from netscrapy.adapters.storage.in_memory import InMemorySnapshotStorage
from netscrapy.core.config import (
    MatchConfig,
    MatchType,
    MetricConfig,
    MetricsConfig,
    NetworkScraperConfig,
    default_metrics_config,
)
from netscrapy.core.errors import (
    ConfigError,
    FilterCompileError,
    NetscrapyError,
    PartialScrapeError,
    ScraperStartError,
    StatSourceError,
    UnsupportedPlatformError,
)
from netscrapy.core.models import MetricSample, MetricsSnapshot
from netscrapy.core.scraper import NetworkScraper, ScrapeResult

__all__ = [
    "ConfigError",
    "FilterCompileError",
    "InMemorySnapshotStorage",
    "MatchConfig",
    "MatchType",
    "MetricConfig",
    "MetricSample",
    "MetricsConfig",
    "MetricsSnapshot",
    "NetscrapyError",
    "NetworkScraper",
    "NetworkScraperConfig",
    "PartialScrapeError",
    "PsutilStatSource",
    "ScrapeController",
    "ScrapeResult",
    "ScraperStartError",
    "StatSourceError",
    "UnsupportedPlatformError",
    "create_network_scraper",
    "default_metrics_config",
]
