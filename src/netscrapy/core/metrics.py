"""Metric definitions and the builder that turns data points into snapshots."""

from netscrapy.core.config import MetricsConfig, default_metrics_config
from netscrapy.core.models import (
    Direction,
    MetricDefinition,
    MetricSample,
    MetricsSnapshot,
)

SYSTEM_NETWORK_CONNECTIONS = "system.network.connections"
SYSTEM_NETWORK_CONNTRACK_COUNT = "system.network.conntrack.count"
SYSTEM_NETWORK_CONNTRACK_MAX = "system.network.conntrack.max"
SYSTEM_NETWORK_DROPPED = "system.network.dropped"
SYSTEM_NETWORK_ERRORS = "system.network.errors"
SYSTEM_NETWORK_IO = "system.network.io"
SYSTEM_NETWORK_PACKETS = "system.network.packets"
SYSTEM_NETWORK_UDP_BUF_ERRORS = "system.network.udp.buf_errors"
SYSTEM_NETWORK_UDP_DATAGRAMS = "system.network.udp.datagrams"
SYSTEM_NETWORK_UDP_ERRORS = "system.network.udp.errors"

METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    d.name: d
    for d in (
        MetricDefinition(
            SYSTEM_NETWORK_CONNECTIONS,
            "{connections}",
            "The number of connections.",
            monotonic=False,
        ),
        MetricDefinition(
            SYSTEM_NETWORK_CONNTRACK_COUNT,
            "{entries}",
            "The count of entries in conntrack table.",
            monotonic=False,
        ),
        MetricDefinition(
            SYSTEM_NETWORK_CONNTRACK_MAX,
            "{entries}",
            "The limit for entries in the conntrack table.",
            monotonic=False,
        ),
        MetricDefinition(
            SYSTEM_NETWORK_DROPPED,
            "{packets}",
            "The number of packets dropped.",
        ),
        MetricDefinition(
            SYSTEM_NETWORK_ERRORS,
            "{errors}",
            "The number of errors encountered.",
        ),
        MetricDefinition(
            SYSTEM_NETWORK_IO,
            "By",
            "The number of bytes transmitted and received.",
        ),
        MetricDefinition(
            SYSTEM_NETWORK_PACKETS,
            "{packets}",
            "The number of packets transferred.",
        ),
        MetricDefinition(
            SYSTEM_NETWORK_UDP_BUF_ERRORS,
            "{errors}",
            "The number of UDP send/receive buffer errors.",
        ),
        MetricDefinition(
            SYSTEM_NETWORK_UDP_DATAGRAMS,
            "{datagrams}",
            "The number of UDP datagrams sent and received.",
        ),
        MetricDefinition(
            SYSTEM_NETWORK_UDP_ERRORS,
            "{errors}",
            "The number of UDP errors.",
        ),
    )
}


class MetricsBuilder:
    """Collects data points for one scrape cycle and emits a snapshot.

    Each ``record_*`` call is dropped when its metric is disabled in the
    config, so callers may record unconditionally.

    Args:
        config: Metric enable flags.
        start_timestamp: Unix timestamp anchoring the cumulative series.
    """

    def __init__(
        self,
        config: MetricsConfig | None = None,
        start_timestamp: float = 0.0,
    ) -> None:
        self._config = config or default_metrics_config()
        self._start_timestamp = start_timestamp
        self._samples: list[MetricSample] = []

    @property
    def start_timestamp(self) -> float:
        return self._start_timestamp

    def _record(
        self, name: str, timestamp: float, value: int, **labels: str
    ) -> None:
        if not self._config.enabled(name):
            return
        self._samples.append(
            MetricSample(
                name=name,
                timestamp=timestamp,
                value=int(value),
                labels=labels,
            )
        )

    def record_system_network_packets_data_point(
        self, timestamp: float, value: int, device: str, direction: Direction
    ) -> None:
        self._record(
            SYSTEM_NETWORK_PACKETS, timestamp, value,
            device=device, direction=direction.value,
        )

    def record_system_network_dropped_data_point(
        self, timestamp: float, value: int, device: str, direction: Direction
    ) -> None:
        self._record(
            SYSTEM_NETWORK_DROPPED, timestamp, value,
            device=device, direction=direction.value,
        )

    def record_system_network_errors_data_point(
        self, timestamp: float, value: int, device: str, direction: Direction
    ) -> None:
        self._record(
            SYSTEM_NETWORK_ERRORS, timestamp, value,
            device=device, direction=direction.value,
        )

    def record_system_network_io_data_point(
        self, timestamp: float, value: int, device: str, direction: Direction
    ) -> None:
        self._record(
            SYSTEM_NETWORK_IO, timestamp, value,
            device=device, direction=direction.value,
        )

    def record_system_network_connections_data_point(
        self, timestamp: float, value: int, protocol: str, state: str
    ) -> None:
        self._record(
            SYSTEM_NETWORK_CONNECTIONS, timestamp, value,
            protocol=protocol, state=state,
        )

    def record_system_network_conntrack_count_data_point(
        self, timestamp: float, value: int
    ) -> None:
        self._record(SYSTEM_NETWORK_CONNTRACK_COUNT, timestamp, value)

    def record_system_network_conntrack_max_data_point(
        self, timestamp: float, value: int
    ) -> None:
        self._record(SYSTEM_NETWORK_CONNTRACK_MAX, timestamp, value)

    def record_system_network_udp_datagrams_data_point(
        self, timestamp: float, value: int, direction: Direction
    ) -> None:
        self._record(
            SYSTEM_NETWORK_UDP_DATAGRAMS, timestamp, value, direction=direction.value
        )

    def record_system_network_udp_buf_errors_data_point(
        self, timestamp: float, value: int, direction: Direction
    ) -> None:
        self._record(
            SYSTEM_NETWORK_UDP_BUF_ERRORS, timestamp, value, direction=direction.value
        )

    def record_system_network_udp_errors_data_point(
        self, timestamp: float, value: int
    ) -> None:
        self._record(SYSTEM_NETWORK_UDP_ERRORS, timestamp, value)

    def emit(self) -> MetricsSnapshot:
        """Return everything recorded so far as a snapshot and reset."""
        samples = tuple(self._samples)
        self._samples = []
        definitions = {
            name: METRIC_DEFINITIONS[name]
            for name in dict.fromkeys(s.name for s in samples)
        }
        return MetricsSnapshot(
            start_timestamp=self._start_timestamp,
            samples=samples,
            definitions=definitions,
        )
