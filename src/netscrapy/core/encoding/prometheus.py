"""Prometheus text exposition encoder for metrics snapshots."""

from collections.abc import Mapping

from netscrapy.core.models import MetricsSnapshot


def _metric_name(name: str, monotonic: bool) -> str:
    base = name.replace(".", "_")
    return f"{base}_total" if monotonic else base


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_labels(labels: Mapping[str, str]) -> str:
    if not labels:
        return ""
    pairs = ",".join(f'{k}="{_escape(v)}"' for k, v in sorted(labels.items()))
    return "{" + pairs + "}"


def encode_prometheus(snapshot: MetricsSnapshot) -> str:
    """Encode a snapshot in Prometheus text format (version 0.0.4).

    Dots in metric names become underscores. Monotonic series are typed
    ``counter`` and get a ``_total`` suffix; the rest are ``gauge``.
    Timestamps are written in milliseconds.

    Samples are written as recorded, without merging. With both
    ``system.network.udp.errors`` and ``system.network.udp.no_ports`` enabled,
    the two values share one unlabeled series and appear as duplicate lines,
    which a Prometheus server rejects. Enable only one of them when scraping
    this output with Prometheus.

    Returns:
        Exposition text, or an empty string for an empty snapshot.
    """
    lines: list[str] = []
    for name in snapshot.names():
        definition = snapshot.definitions.get(name)
        monotonic = definition.monotonic if definition else False
        exposed = _metric_name(name, monotonic)
        if definition is not None:
            lines.append(f"# HELP {exposed} {definition.description}")
        lines.append(f"# TYPE {exposed} {'counter' if monotonic else 'gauge'}")
        for sample in snapshot.series(name):
            labels = _format_labels(sample.labels)
            timestamp_ms = int(sample.timestamp * 1000)
            lines.append(f"{exposed}{labels} {sample.value} {timestamp_ms}")

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
