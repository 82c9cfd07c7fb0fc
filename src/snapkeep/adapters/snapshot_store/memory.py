"""In-memory snapshot store.

A tiny, dependency-free `SnapshotStore` meant for **tests**, examples and
interactive exploration. Snapshot files are kept as markdown strings keyed
by ``(variant, unit)`` so that every load and save goes through the same
codec as the filesystem store. Nothing persists across process restarts.

Typical usage
-------------
    store = MemorySnapshotStore()
    store.save("basics", SnapshotFile({"basic": ["aaa"]}))
    store.load("basics").get("basic", 1)  # "aaa"
"""

from __future__ import annotations

import threading

from snapkeep.domain.models import SnapshotFile, validate_unit, validate_variant
from snapkeep.interfaces.snapshot_store import SnapshotStore

from . import codec

__all__ = ["MemorySnapshotStore"]

Key = tuple[str | None, str]


class MemorySnapshotStore(SnapshotStore):
    """In-memory snapshot store backed by two dicts of serialized files."""

    def __init__(self) -> None:
        self._files: dict[Key, str] = {}
        self._candidates: dict[Key, str] = {}
        self._lock = threading.RLock()

    # --- Stored snapshots ---

    def load(self, unit: str, variant: str | None = None) -> SnapshotFile:
        return self._read(self._files, self._key(unit, variant))

    def save(
        self, unit: str, snapshot_file: SnapshotFile, variant: str | None = None
    ) -> None:
        self._write(self._files, self._key(unit, variant), snapshot_file)

    def delete(self, unit: str, variant: str | None = None) -> bool:
        key = self._key(unit, variant)
        with self._lock:
            removed = self._files.pop(key, None) is not None
            return self._candidates.pop(key, None) is not None or removed

    def units(self, variant: str | None = None) -> list[str]:
        return self._list(self._files, variant)

    # --- Candidate snapshots ---

    def load_candidates(self, unit: str, variant: str | None = None) -> SnapshotFile:
        return self._read(self._candidates, self._key(unit, variant))

    def save_candidates(
        self, unit: str, snapshot_file: SnapshotFile, variant: str | None = None
    ) -> None:
        self._write(self._candidates, self._key(unit, variant), snapshot_file)

    def candidate_units(self, variant: str | None = None) -> list[str]:
        return self._list(self._candidates, variant)

    # --- Introspection (tests) ---

    def raw(self, unit: str, variant: str | None = None) -> str | None:
        """Return the serialized stored file of `unit`, or None."""
        return self._files.get(self._key(unit, variant))

    # --- Internal Helpers ---

    @staticmethod
    def _key(unit: str, variant: str | None) -> Key:
        return (validate_variant(variant), validate_unit(unit))

    def _read(self, files: dict[Key, str], key: Key) -> SnapshotFile:
        with self._lock:
            content = files.get(key)
        if content is None:
            return SnapshotFile()
        return codec.loads(content, source=f"mem://{key[0] or ''}/{key[1]}")

    def _write(
        self, files: dict[Key, str], key: Key, snapshot_file: SnapshotFile
    ) -> None:
        with self._lock:
            if snapshot_file:
                files[key] = codec.dumps(snapshot_file)
            else:
                files.pop(key, None)

    def _list(self, files: dict[Key, str], variant: str | None) -> list[str]:
        variant = validate_variant(variant)
        with self._lock:
            return sorted(unit for (v, unit) in files if v == variant)
