"""Whole-forest snapshot persistence backends."""

from navtree.store.snapshot import (
    JsonFileSnapshotStore,
    PersistenceError,
    SnapshotStore,
    SqliteSnapshotStore,
)

__all__ = ["JsonFileSnapshotStore", "PersistenceError", "SnapshotStore", "SqliteSnapshotStore"]
