"""Snapshot encoders."""

from netscrapy.core.encoding.ndjson import encode_ndjson
from netscrapy.core.encoding.prometheus import encode_prometheus

__all__ = ["encode_ndjson", "encode_prometheus"]
