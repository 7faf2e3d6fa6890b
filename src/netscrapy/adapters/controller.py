"""Periodic scrape loop driving a NetworkScraper."""

import asyncio
import contextlib
import logging

from netscrapy.core.ports import SnapshotStoragePort
from netscrapy.core.scraper import NetworkScraper, ScrapeResult

logger = logging.getLogger(__name__)


class ScrapeController:
    """Runs ``scraper.scrape()`` every ``interval`` seconds.

    Cycles never overlap: the next one is scheduled only after the previous
    one finished. Each result is written to ``storage``; partial failures
    are logged and the loop keeps going. ``stop()`` is final: it shuts the
    scraper down and the controller cannot be started again.

    Args:
        scraper: The scraper to drive.
        storage: Where each scrape result is written.
        interval: Seconds between the start of consecutive cycles.
        timeout: Deadline in seconds for each whole scrape cycle, also used
            for the start-up boot time query.
    """

    def __init__(
        self,
        scraper: NetworkScraper,
        storage: SnapshotStoragePort,
        interval: float = 60.0,
        timeout: float | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._scraper = scraper
        self._storage = storage
        self._interval = interval
        self._timeout = timeout
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def scrape_once(self) -> ScrapeResult:
        """Run a single cycle and store its result."""
        result = await self._scraper.scrape(timeout=self._timeout)
        if result.error is not None:
            logger.warning("Network scrape partially failed: %s", result.error)
        await self._storage.write(result)
        return result

    async def start(self) -> None:
        """Start the scraper and launch the background loop.

        Raises:
            RuntimeError: If the controller was already stopped.
            ScraperStartError: If the scraper cannot start.
        """
        if self._stopped:
            raise RuntimeError("ScrapeController cannot be restarted after stop()")
        if self.running:
            return
        await self._scraper.start(timeout=self._timeout)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop and shut the scraper down.

        A cycle interrupted by the stop still stores its partial result.
        """
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        await self._scraper.shutdown()
        logger.info("Network scrape controller stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while not self._stopped:
            started = loop.time()
            try:
                await self.scrape_once()
            except Exception:
                logger.exception("Network scrape failed")
            if self._stopped:
                break
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self._interval - elapsed))
