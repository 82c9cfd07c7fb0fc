"""Global pytest fixtures and hooks for SNAPKEEP.

Tests are marked after the suite directory they live in (``tests/unit`` ->
``unit``, ``tests/e2e`` -> ``e2e`` and so on) unless they carry that mark
already, so ``-m unit`` selects a suite without per-file boilerplate.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from snapkeep import config as snapkeep_config
from snapkeep.adapters.snapshot_store import MemorySnapshotStore

# pylint: disable=unused-argument

pytest_plugins = ["pytester"]

TESTS_ROOT = Path(__file__).parent.resolve()
SUITE_MARKERS = ("unit", "contract", "integration", "e2e")


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add the suite mark of each item's top-level test directory."""
    for item in items:
        try:
            suite = item.path.resolve().relative_to(TESTS_ROOT).parts[0]
        except ValueError:
            continue
        if suite not in SUITE_MARKERS:
            continue
        if not any(marker.name == suite for marker in item.iter_markers()):
            item.add_marker(getattr(pytest.mark, suite))


@pytest.fixture(autouse=True)
def clean_snapkeep_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SNAPKEEP_* variables of the developer's shell out of the tests."""
    for name in (
        snapkeep_config.SNAPSHOT_DIR_ENVVAR,
        snapkeep_config.MODE_ENVVAR,
        snapkeep_config.VARIANT_ENVVAR,
        "SNAPKEEP_LOG_PATH",
        "SNAPKEEP_LOGGER_LEVELS",
        "SNAPKEEP_FLIGHT_RECORDER",
        "SNAPKEEP_FORCE_FLUSH_FLIGHT_RECORDER",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def memory_store() -> MemorySnapshotStore:
    """A fresh in-memory snapshot store."""
    return MemorySnapshotStore()
