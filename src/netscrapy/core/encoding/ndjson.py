"""NDJSON encoder for metrics snapshots."""

import json

from netscrapy.core.models import MetricsSnapshot


def encode_ndjson(snapshot: MetricsSnapshot) -> str:
    """Encode a snapshot to newline-delimited JSON.

    Args:
        snapshot: The snapshot to encode.

    Returns:
        NDJSON string with one JSON object per sample.
        Empty string if the snapshot has no samples.
    """
    lines = []
    for sample in snapshot.samples:
        definition = snapshot.definitions.get(sample.name)
        obj = {
            "name": sample.name,
            "timestamp": sample.timestamp,
            "start_timestamp": snapshot.start_timestamp,
            "value": sample.value,
            "labels": dict(sample.labels),
            "unit": definition.unit if definition else "",
        }
        lines.append(json.dumps(obj))

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
