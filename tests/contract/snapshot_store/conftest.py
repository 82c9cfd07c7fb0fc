"""Pytest fixtures for snapshot store contract tests.

Provided fixtures
-----------------
- **snapshot_store**: Parametrized backend factory that returns a **fresh**
  `SnapshotStore` per test. Supports `"memory"` (in-memory) and `"local"`
  (markdown files under ``tmp_path``). To exercise another backend, add its
  key to the `params` list and branch in the fixture body.

- **sample_file**: Small snapshot file with two labels, one of them holding
  several records including an empty and a multi-line text.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from snapkeep.adapters.snapshot_store import LocalSnapshotStore, MemorySnapshotStore
from snapkeep.domain.models import SnapshotFile
from snapkeep.interfaces.snapshot_store import SnapshotStore


@pytest.fixture(params=["memory", "local"])
def snapshot_store(request: pytest.FixtureRequest, tmp_path: Path) -> SnapshotStore:
    """Return a fresh snapshot store for the requested backend."""
    match request.param:
        case "memory":
            return MemorySnapshotStore()
        case "local":
            return LocalSnapshotStore(root=tmp_path / "snaps")
        case _:
            raise ValueError(f"unknown store type: {request.param}")


@pytest.fixture
def sample_file() -> SnapshotFile:
    """Deterministic snapshot file for round trips."""
    return SnapshotFile(
        {
            "basic": ["aaa", "", "multi\nline\n"],
            "other label": ["    indented"],
        }
    )
