"""Fixtures for end-to-end tests of the ``snapkeep`` command.

Provides a CliRunner whose flight recorder writes into the test's temporary
directory, a local snapshot store under that directory, and a helper that
runs comparator passes to leave snapshots awaiting review.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from snapkeep.adapters.snapshot_store import LocalSnapshotStore
from snapkeep.service_layer.comparator import SnapshotComparator

# pylint: disable=redefined-outer-name


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    """Root of the snapshot store used by the CLI under test."""
    return tmp_path / "_snaps"


@pytest.fixture
def store(snapshot_dir: Path) -> LocalSnapshotStore:
    """Local store over `snapshot_dir`, shared with the CLI."""
    return LocalSnapshotStore(snapshot_dir)


@pytest.fixture
def runner(tmp_path: Path) -> CliRunner:
    """Return a CliRunner that keeps the flight recorder inside tmp_path."""
    return CliRunner(env={"SNAPKEEP_LOG_PATH": str(tmp_path / "snapkeep.log")})


@pytest.fixture
def record_run(store: LocalSnapshotStore) -> Callable[..., None]:
    """Return a helper running one comparator pass over `(label, text)` pairs."""

    def _run(unit: str, *pairs: tuple[str, str], variant: str | None = None) -> None:
        comparator = SnapshotComparator(store, unit, variant=variant)
        for label, text in pairs:
            comparator.compare(label, text)
        comparator.finish()

    return _run


@pytest.fixture
def changed(record_run, store) -> LocalSnapshotStore:
    """Store where unit ``parser`` has two labels awaiting review."""
    record_run("parser", ("lists", "[1, 2]"), ("dicts", "{a: 1}"), ("same", "x"))
    record_run("parser", ("lists", "[1, 2, 3]"), ("dicts", "{a: 2}"), ("same", "x"))
    return store
