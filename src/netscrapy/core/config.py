"""Configuration for the network scraper.

Configuration is immutable: a scraper keeps the config it was built with for
its whole lifetime. Toggling a metric requires building a new scraper.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from netscrapy.core.errors import ConfigError


@dataclass(frozen=True)
class MetricConfig:
    """Common config for a single metric."""

    enabled: bool


def _metric(name: str, enabled: bool) -> Any:
    return field(
        default_factory=lambda: MetricConfig(enabled=enabled),
        metadata={"name": name},
    )


@dataclass(frozen=True)
class MetricsConfig:
    """Enable flags for every metric the network scraper can report.

    Note:
        ``system_network_udp_no_ports`` records into the
        ``system.network.udp.errors`` series, so its points only appear when
        ``system_network_udp_errors`` is enabled as well.
    """

    system_network_connections: MetricConfig = _metric(
        "system.network.connections", True
    )
    system_network_conntrack_count: MetricConfig = _metric(
        "system.network.conntrack.count", False
    )
    system_network_conntrack_max: MetricConfig = _metric(
        "system.network.conntrack.max", False
    )
    system_network_dropped: MetricConfig = _metric("system.network.dropped", True)
    system_network_errors: MetricConfig = _metric("system.network.errors", True)
    system_network_io: MetricConfig = _metric("system.network.io", True)
    system_network_packets: MetricConfig = _metric("system.network.packets", True)
    system_network_udp_buf_errors: MetricConfig = _metric(
        "system.network.udp.buf_errors", False
    )
    system_network_udp_datagrams: MetricConfig = _metric(
        "system.network.udp.datagrams", False
    )
    system_network_udp_errors: MetricConfig = _metric(
        "system.network.udp.errors", False
    )
    system_network_udp_no_ports: MetricConfig = _metric(
        "system.network.udp.no_ports", False
    )

    def enabled(self, name: str) -> bool:
        """Return whether the metric with the given dotted name is enabled."""
        return getattr(self, _ATTR_BY_NAME[name]).enabled

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MetricsConfig":
        """Build from ``{"system.network.io": {"enabled": False}, ...}``.

        Metrics not mentioned keep their default.

        Raises:
            ConfigError: On unknown metric names or malformed entries.
        """
        if not isinstance(data, Mapping):
            raise ConfigError("'metrics' must be a mapping of metric names")
        overrides: dict[str, MetricConfig] = {}
        for name, entry in data.items():
            if name not in _ATTR_BY_NAME:
                raise ConfigError(f"unknown metric {name!r}")
            if not isinstance(entry, Mapping) or set(entry) - {"enabled"}:
                raise ConfigError(
                    f"metric {name!r} must be a mapping with only an 'enabled' key"
                )
            enabled = entry.get("enabled", getattr(cls(), _ATTR_BY_NAME[name]).enabled)
            if not isinstance(enabled, bool):
                raise ConfigError(f"metric {name!r}: 'enabled' must be a boolean")
            overrides[_ATTR_BY_NAME[name]] = MetricConfig(enabled=enabled)
        return replace(cls(), **overrides)


_ATTR_BY_NAME = {f.metadata["name"]: f.name for f in fields(MetricsConfig)}

METRIC_NAMES = tuple(_ATTR_BY_NAME)


def default_metrics_config() -> MetricsConfig:
    """Return the default metric enable flags."""
    return MetricsConfig()


class MatchType(str, Enum):
    """How interface patterns are compared against interface names."""

    STRICT = "strict"
    REGEXP = "regexp"


@dataclass(frozen=True)
class MatchConfig:
    """Interface name patterns plus the way they are matched."""

    interfaces: tuple[str, ...] = ()
    match_type: MatchType = MatchType.STRICT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MatchConfig":
        if not isinstance(data, Mapping):
            raise ConfigError("match config must be a mapping")
        unknown = set(data) - {"interfaces", "match_type"}
        if unknown:
            raise ConfigError(f"unknown match keys: {sorted(unknown)}")
        interfaces = data.get("interfaces", ())
        if not isinstance(interfaces, (list, tuple)) or not all(
            isinstance(i, str) for i in interfaces
        ):
            raise ConfigError("'interfaces' must be a list of strings")
        try:
            match_type = MatchType(data.get("match_type", MatchType.STRICT))
        except ValueError as exc:
            raise ConfigError(
                f"unknown match_type {data.get('match_type')!r}"
            ) from exc
        return cls(interfaces=tuple(interfaces), match_type=match_type)


@dataclass(frozen=True)
class NetworkScraperConfig:
    """Complete network scraper configuration.

    Attributes:
        metrics: Per-metric enable flags.
        include: Interfaces to keep. None keeps all interfaces.
        exclude: Interfaces to drop. None drops nothing.
        env_overrides: Environment overrides handed to the stat source
            (e.g., ``{"HOST_PROC": "/hostfs/proc"}``).
    """

    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    include: MatchConfig | None = None
    exclude: MatchConfig | None = None
    env_overrides: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not isinstance(self.env_overrides, MappingProxyType):
            object.__setattr__(
                self, "env_overrides", MappingProxyType(dict(self.env_overrides))
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NetworkScraperConfig":
        """Build a config from a parsed YAML/JSON mapping.

        Raises:
            ConfigError: If the mapping contains unknown keys or bad values.
        """
        if not isinstance(data, Mapping):
            raise ConfigError("config must be a mapping")
        unknown = set(data) - {"metrics", "include", "exclude", "env"}
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}")

        include = data.get("include")
        exclude = data.get("exclude")
        metrics = data.get("metrics")
        env = data.get("env")
        if env is None:
            env = {}
        if not isinstance(env, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in env.items()
        ):
            raise ConfigError("'env' must map strings to strings")

        return cls(
            metrics=MetricsConfig.from_dict({} if metrics is None else metrics),
            include=MatchConfig.from_dict(include) if include is not None else None,
            exclude=MatchConfig.from_dict(exclude) if exclude is not None else None,
            env_overrides=env,
        )
