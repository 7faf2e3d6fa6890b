"""Core domain models for network statistics and metric data."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Direction(str, Enum):
    """Direction label attached to per-interface and UDP counters."""

    TRANSMIT = "transmit"
    RECEIVE = "receive"


@dataclass(frozen=True)
class NetIOCounters:
    """Cumulative IO counters for a single network interface.

    Attributes:
        name: Interface name (e.g., eth0).
        bytes_sent: Bytes transmitted since boot.
        bytes_recv: Bytes received since boot.
        packets_sent: Packets transmitted since boot.
        packets_recv: Packets received since boot.
        errin: Receive errors.
        errout: Transmit errors.
        dropin: Dropped incoming packets.
        dropout: Dropped outgoing packets.
    """

    name: str
    bytes_sent: int = 0
    bytes_recv: int = 0
    packets_sent: int = 0
    packets_recv: int = 0
    errin: int = 0
    errout: int = 0
    dropin: int = 0
    dropout: int = 0


@dataclass(frozen=True)
class ConnectionRecord:
    """A single observed socket connection.

    Attributes:
        status: Connection state label (e.g., ESTABLISHED).
        laddr: Local address as (ip, port), if known.
        raddr: Remote address as (ip, port), if known.
        pid: Owning process id, if known.
    """

    status: str
    laddr: tuple[str, int] | None = None
    raddr: tuple[str, int] | None = None
    pid: int | None = None


@dataclass(frozen=True)
class ConntrackCounters:
    """Connection-tracking table usage."""

    count: int
    max: int


@dataclass(frozen=True)
class ProtocolCounters:
    """Named counters for one protocol, as found in /proc/net/snmp."""

    protocol: str
    stats: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricDefinition:
    """Static description of a metric series.

    Attributes:
        name: Metric name (e.g., system.network.io).
        unit: UCUM-style unit string.
        description: Human-readable description.
        monotonic: True for cumulative counters, False for up/down values.
    """

    name: str
    unit: str
    description: str
    monotonic: bool = True


@dataclass(frozen=True)
class MetricSample:
    """A single metric data point.

    Attributes:
        name: Metric name.
        timestamp: Unix timestamp in seconds when the value was sampled.
        value: The integer counter value.
        labels: Key-value pairs for metric dimensions. Stored as a
            read-only copy of the mapping passed in.
    """

    name: str
    timestamp: float
    value: int
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))


@dataclass(frozen=True)
class MetricsSnapshot:
    """Immutable result of one scrape cycle.

    Attributes:
        start_timestamp: Unix timestamp anchoring the cumulative series
            (host boot time).
        samples: Data points in the order they were recorded.
        definitions: Definitions of every series present in ``samples``.
    """

    start_timestamp: float
    samples: tuple[MetricSample, ...] = ()
    definitions: Mapping[str, MetricDefinition] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "samples", tuple(self.samples))
        object.__setattr__(
            self, "definitions", MappingProxyType(dict(self.definitions))
        )

    def __len__(self) -> int:
        return len(self.samples)

    def series(self, name: str) -> list[MetricSample]:
        """Return all samples recorded for the given metric name."""
        return [s for s in self.samples if s.name == name]

    def names(self) -> list[str]:
        """Return distinct metric names in first-seen order."""
        return list(dict.fromkeys(s.name for s in self.samples))
