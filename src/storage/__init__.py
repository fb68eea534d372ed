"""Storage — персистентность снапшотов рынка в JSON файл."""

from .snapshot_store import SnapshotStore, StorageConfig

__all__ = [
    "SnapshotStore",
    "StorageConfig",
]
