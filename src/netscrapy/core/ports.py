"""Port interfaces for statistics sources and snapshot storage.

The scraper depends only on these protocols. Each statistics query is its own
protocol so a fake can stand in for any one of them; ``StatSourcePort``
bundles all five.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from netscrapy.core.models import (
    ConnectionRecord,
    ConntrackCounters,
    NetIOCounters,
    ProtocolCounters,
)

if TYPE_CHECKING:
    from netscrapy.core.scraper import ScrapeResult


@runtime_checkable
class BootTimeSource(Protocol):
    async def boot_time(self) -> int:
        """Return host boot time as unix seconds."""
        ...


@runtime_checkable
class IOCountersSource(Protocol):
    async def io_counters(self, per_interface: bool = True) -> list[NetIOCounters]:
        """Return cumulative IO counters, one record per interface."""
        ...


@runtime_checkable
class ConnectionsSource(Protocol):
    async def connections(self, kind: str = "tcp") -> list[ConnectionRecord]:
        """Return every open connection of the given kind."""
        ...


@runtime_checkable
class ConntrackSource(Protocol):
    async def conntrack_counters(self) -> list[ConntrackCounters]:
        """Return connection-tracking table counters."""
        ...


@runtime_checkable
class ProtocolCountersSource(Protocol):
    async def protocol_counters(
        self, protocols: Sequence[str]
    ) -> list[ProtocolCounters]:
        """Return per-protocol counters for the requested protocols."""
        ...


@runtime_checkable
class StatSourcePort(
    BootTimeSource,
    IOCountersSource,
    ConnectionsSource,
    ConntrackSource,
    ProtocolCountersSource,
    Protocol,
):
    """Port for operating-system network statistics.

    Every query may fail independently by raising an exception.
    Examples: PsutilStatSource.
    """


@runtime_checkable
class SnapshotStoragePort(Protocol):
    """Port for keeping the most recent scrape result.

    Examples: InMemorySnapshotStorage.
    """

    async def write(self, result: "ScrapeResult") -> None:
        """Replace the stored result."""
        ...

    async def latest(self) -> "ScrapeResult | None":
        """Return the most recent result, or None before the first scrape."""
        ...
