"""Snapshot store adapters and the markdown snapshot codec."""

from .local import LocalSnapshotStore
from .memory import MemorySnapshotStore

__all__ = ["LocalSnapshotStore", "MemorySnapshotStore"]
