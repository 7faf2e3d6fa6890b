"""In-memory storage adapter for scrape results."""

from netscrapy.core.scraper import ScrapeResult


class InMemorySnapshotStorage:
    """In-memory implementation of SnapshotStoragePort.

    Keeps only the most recent scrape result; older results are discarded
    when a new one is written.
    """

    def __init__(self) -> None:
        self._latest: ScrapeResult | None = None
        self._writes = 0

    async def write(self, result: ScrapeResult) -> None:
        """Replace the stored result."""
        self._latest = result
        self._writes += 1

    async def latest(self) -> ScrapeResult | None:
        """Return the most recent result, or None before the first write."""
        return self._latest

    @property
    def writes(self) -> int:
        """Number of results written since creation."""
        return self._writes
