"""Storage adapters implementing core ports."""

from netscrapy.adapters.storage.in_memory import InMemorySnapshotStorage

__all__ = ["InMemorySnapshotStorage"]
