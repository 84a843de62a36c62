"""Snapshot storage backends."""

from flowbridge.backends.base import SnapshotBackend
from flowbridge.backends.memory import MemoryBackend
from flowbridge.backends.sqlite import SQLiteBackend

__all__ = [
    "SnapshotBackend",
    "MemoryBackend",
    "SQLiteBackend",
]
