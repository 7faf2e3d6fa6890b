"""Network scraper: one scrape cycle over four independent statistic groups.

Each group (interface IO counters, TCP connections, conntrack, UDP protocol
counters) issues at most one query. A failing group is recorded as a partial
failure with a fixed metric count and the remaining groups still run. An
optional timeout bounds the whole cycle, not each query.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from netscrapy.core.config import NetworkScraperConfig
from netscrapy.core.errors import (
    PartialScrapeError,
    ScrapeErrors,
    ScraperStartError,
    StatSourceError,
)
from netscrapy.core.filter import InterfaceFilter
from netscrapy.core.metrics import MetricsBuilder
from netscrapy.core.models import (
    ConnectionRecord,
    Direction,
    MetricsSnapshot,
    NetIOCounters,
)
from netscrapy.core.ports import StatSourcePort

logger = logging.getLogger(__name__)

NETWORK_METRICS_LEN = 4
CONNECTIONS_METRICS_LEN = 1
PROTO_METRICS_LEN = 4

ALL_TCP_STATES = (
    "CLOSE_WAIT",
    "CLOSE",
    "CLOSING",
    "DELETE",
    "ESTABLISHED",
    "FIN_WAIT_1",
    "FIN_WAIT_2",
    "LAST_ACK",
    "LISTEN",
    "SYN_SENT",
    "SYN_RECV",
    "TIME_WAIT",
)

_T = TypeVar("_T")


@dataclass(frozen=True)
class ScrapeResult:
    """Snapshot of one scrape cycle plus its combined partial failure."""

    snapshot: MetricsSnapshot
    error: PartialScrapeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def get_tcp_connection_status_counts(
    connections: Iterable[ConnectionRecord],
) -> dict[str, int]:
    """Count connections per TCP state.

    Every known state is present, defaulting to zero. States outside the
    known set are counted under their own key.
    """
    counts = dict.fromkeys(ALL_TCP_STATES, 0)
    for connection in connections:
        counts[connection.status] = counts.get(connection.status, 0) + 1
    return counts


@dataclass
class _CycleContext:
    """State shared by the groups of one scrape cycle."""

    mb: MetricsBuilder
    deadline: float | None = None
    cancelled: bool = False

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - asyncio.get_running_loop().time()


class NetworkScraper:
    """Scrapes host network statistics into metrics snapshots.

    Call ``start()`` once, then ``scrape()`` once per collection interval.
    Concurrent ``scrape()`` calls on one instance are not supported.

    Args:
        config: Immutable scraper configuration.
        source: Statistics source for every OS query.

    Raises:
        FilterCompileError: If an interface pattern is invalid.
    """

    def __init__(self, config: NetworkScraperConfig, source: StatSourcePort) -> None:
        self._config = config
        self._source = source
        self._filter = InterfaceFilter.from_config(config.include, config.exclude)
        self._start_time: float | None = None
        self._mb: MetricsBuilder | None = None
        self._stopped = False

    @property
    def config(self) -> NetworkScraperConfig:
        return self._config

    @property
    def source(self) -> StatSourcePort:
        return self._source

    @property
    def interface_filter(self) -> InterfaceFilter:
        return self._filter

    @property
    def start_time(self) -> float | None:
        return self._start_time

    @property
    def started(self) -> bool:
        return self._start_time is not None and not self._stopped

    async def start(self, timeout: float | None = None) -> None:
        """Capture host boot time as the start timestamp.

        Raises:
            ScraperStartError: If boot time cannot be read.
        """
        if self._start_time is not None:
            return
        try:
            if timeout is None:
                boot_time = await self._source.boot_time()
            else:
                boot_time = await asyncio.wait_for(self._source.boot_time(), timeout)
        except Exception as exc:
            raise ScraperStartError(f"failed to read boot time: {exc}") from exc
        self._start_time = float(boot_time)
        self._mb = MetricsBuilder(
            self._config.metrics, start_timestamp=self._start_time
        )
        logger.info("Network scraper started, boot time %d", boot_time)

    async def shutdown(self) -> None:
        self._stopped = True

    async def scrape(self, timeout: float | None = None) -> ScrapeResult:
        """Run one scrape cycle.

        Args:
            timeout: Seconds allowed for the whole cycle. Each query only gets
                the time left before that deadline; a group whose query runs
                out of time, or starts after the deadline, fails on its own.

        Cancelling the task awaiting ``scrape()`` while a query is running
        fails that group and every group after it. The cycle still returns
        the points recorded so far.

        Returns:
            The snapshot and the combined partial error (None if every group
            succeeded).

        Raises:
            RuntimeError: If the scraper is not started or has been shut down.
        """
        if self._mb is None or self._stopped:
            raise RuntimeError("Network scraper is not started")

        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout
        ctx = _CycleContext(mb=self._mb, deadline=deadline)

        errors = ScrapeErrors()
        groups: list[tuple[int, Callable[[_CycleContext], Awaitable[None]]]] = [
            (NETWORK_METRICS_LEN, self._record_network_counter_metrics),
            (CONNECTIONS_METRICS_LEN, self._record_network_connections_metrics),
            (CONNECTIONS_METRICS_LEN, self._record_network_conntrack_metrics),
            (PROTO_METRICS_LEN, self._record_network_proto_counter_metrics),
        ]
        for failed, record in groups:
            try:
                await record(ctx)
            except StatSourceError as exc:
                logger.debug("Network scrape group failed: %s", exc)
                errors.add_partial(failed, exc)

        return ScrapeResult(snapshot=ctx.mb.emit(), error=errors.combine())

    async def _fetch(
        self, ctx: _CycleContext, query: Callable[[], Awaitable[_T]], what: str
    ) -> _T:
        if ctx.cancelled:
            raise StatSourceError(f"failed to read {what}: scrape cancelled")
        remaining = ctx.remaining()
        if remaining is not None and remaining <= 0:
            raise StatSourceError(f"failed to read {what}: deadline exceeded")
        try:
            if remaining is None:
                return await query()
            return await asyncio.wait_for(query(), remaining)
        except asyncio.TimeoutError as exc:
            raise StatSourceError(f"failed to read {what}: deadline exceeded") from exc
        except asyncio.CancelledError as exc:
            ctx.cancelled = True
            raise StatSourceError(f"failed to read {what}: scrape cancelled") from exc
        except Exception as exc:
            raise StatSourceError(f"failed to read {what}: {exc}") from exc

    async def _record_network_counter_metrics(self, ctx: _CycleContext) -> None:
        now = time.time()
        io_counters = await self._fetch(
            ctx,
            lambda: self._source.io_counters(per_interface=True),
            "network IO stats",
        )

        io_counters = self._filter.filter_by_interface(io_counters)
        if io_counters:
            self._record_network_packets_metric(ctx.mb, now, io_counters)
            self._record_network_dropped_packets_metric(ctx.mb, now, io_counters)
            self._record_network_error_packets_metric(ctx.mb, now, io_counters)
            self._record_network_io_metric(ctx.mb, now, io_counters)

    @staticmethod
    def _record_network_packets_metric(
        mb: MetricsBuilder, now: float, io_counters: list[NetIOCounters]
    ) -> None:
        for c in io_counters:
            mb.record_system_network_packets_data_point(
                now, c.packets_sent, c.name, Direction.TRANSMIT
            )
            mb.record_system_network_packets_data_point(
                now, c.packets_recv, c.name, Direction.RECEIVE
            )

    @staticmethod
    def _record_network_dropped_packets_metric(
        mb: MetricsBuilder, now: float, io_counters: list[NetIOCounters]
    ) -> None:
        for c in io_counters:
            mb.record_system_network_dropped_data_point(
                now, c.dropout, c.name, Direction.TRANSMIT
            )
            mb.record_system_network_dropped_data_point(
                now, c.dropin, c.name, Direction.RECEIVE
            )

    @staticmethod
    def _record_network_error_packets_metric(
        mb: MetricsBuilder, now: float, io_counters: list[NetIOCounters]
    ) -> None:
        for c in io_counters:
            mb.record_system_network_errors_data_point(
                now, c.errout, c.name, Direction.TRANSMIT
            )
            mb.record_system_network_errors_data_point(
                now, c.errin, c.name, Direction.RECEIVE
            )

    @staticmethod
    def _record_network_io_metric(
        mb: MetricsBuilder, now: float, io_counters: list[NetIOCounters]
    ) -> None:
        for c in io_counters:
            mb.record_system_network_io_data_point(
                now, c.bytes_sent, c.name, Direction.TRANSMIT
            )
            mb.record_system_network_io_data_point(
                now, c.bytes_recv, c.name, Direction.RECEIVE
            )

    async def _record_network_connections_metrics(self, ctx: _CycleContext) -> None:
        if not self._config.metrics.system_network_connections.enabled:
            logger.debug("Skipping TCP connections, metric disabled")
            return
        now = time.time()
        connections = await self._fetch(
            ctx, lambda: self._source.connections("tcp"), "TCP connections"
        )
        for state, count in get_tcp_connection_status_counts(connections).items():
            ctx.mb.record_system_network_connections_data_point(
                now, count, "tcp", state
            )

    async def _record_network_conntrack_metrics(self, ctx: _CycleContext) -> None:
        metrics = self._config.metrics
        if not (
            metrics.system_network_conntrack_count.enabled
            or metrics.system_network_conntrack_max.enabled
        ):
            logger.debug("Skipping conntrack, metrics disabled")
            return
        now = time.time()
        conntrack = await self._fetch(
            ctx, self._source.conntrack_counters, "conntrack info"
        )
        if not conntrack:
            raise StatSourceError("no conntrack counters available")
        counters = conntrack[0]
        ctx.mb.record_system_network_conntrack_count_data_point(now, counters.count)
        ctx.mb.record_system_network_conntrack_max_data_point(now, counters.max)

    async def _record_network_proto_counter_metrics(
        self, ctx: _CycleContext
    ) -> None:
        metrics = self._config.metrics
        if not (
            metrics.system_network_udp_datagrams.enabled
            or metrics.system_network_udp_buf_errors.enabled
            or metrics.system_network_udp_errors.enabled
            or metrics.system_network_udp_no_ports.enabled
        ):
            logger.debug("Skipping UDP protocol counters, metrics disabled")
            return
        now = time.time()
        proto_counters = await self._fetch(
            ctx,
            lambda: self._source.protocol_counters(["udp"]),
            "network proto counters",
        )
        if not proto_counters:
            raise StatSourceError("no network proto counters available")

        mb = ctx.mb
        for counter in proto_counters:
            stats = counter.stats
            if metrics.system_network_udp_datagrams.enabled:
                mb.record_system_network_udp_datagrams_data_point(
                    now, stats.get("OutDatagrams", 0), Direction.TRANSMIT
                )
                mb.record_system_network_udp_datagrams_data_point(
                    now, stats.get("InDatagrams", 0), Direction.RECEIVE
                )
            if metrics.system_network_udp_buf_errors.enabled:
                mb.record_system_network_udp_buf_errors_data_point(
                    now, stats.get("SndbufErrors", 0), Direction.TRANSMIT
                )
                mb.record_system_network_udp_buf_errors_data_point(
                    now, stats.get("RcvbufErrors", 0), Direction.RECEIVE
                )
            if metrics.system_network_udp_errors.enabled:
                mb.record_system_network_udp_errors_data_point(
                    now, stats.get("InErrors", 0)
                )
            if metrics.system_network_udp_no_ports.enabled:
                # NoPorts shares the udp.errors series.
                mb.record_system_network_udp_errors_data_point(
                    now, stats.get("NoPorts", 0)
                )
