"""Build stores, comparators and synchronizers from settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from snapkeep import config
from snapkeep.adapters.snapshot_store import LocalSnapshotStore, MemorySnapshotStore
from snapkeep.domain.models import validate_variant
from snapkeep.interfaces.execution_mode import ExecutionMode
from snapkeep.interfaces.snapshot_store import SnapshotStore
from snapkeep.interfaces.transform import Transform
from snapkeep.service_layer.comparator import SnapshotComparator
from snapkeep.service_layer.synchronizer import SnapshotSynchronizer

MEMORY_ROOT = ":memory:"


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    settings: config.Settings
    store: SnapshotStore

    def comparator(
        self, unit: str, *, transform: Transform | None = None
    ) -> SnapshotComparator:
        """Return a comparator for `unit` using the container's settings."""
        return build_comparator(
            self.store,
            unit,
            mode=self.settings.mode,
            transform=transform,
            variant=self.settings.variant,
        )

    def synchronizer(self, unit: str) -> SnapshotSynchronizer:
        """Return a synchronizer for `unit` using the container's settings."""
        return build_synchronizer(self.store, unit, variant=self.settings.variant)


def build_store(root: str | Path) -> SnapshotStore:
    """Build a snapshot store; ``":memory:"`` selects the in-memory backend."""
    if str(root) == MEMORY_ROOT:
        return MemorySnapshotStore()
    return LocalSnapshotStore(root)


def build_comparator(  # pylint: disable=too-many-arguments
    store: SnapshotStore,
    unit: str,
    *,
    mode: ExecutionMode | None = None,
    transform: Transform | None = None,
    variant: str | None = None,
) -> SnapshotComparator:
    """Build a comparator, detecting the execution mode when none is given."""
    return SnapshotComparator(
        store,
        unit,
        mode=mode if mode is not None else config.detect_execution_mode(),
        transform=transform,
        variant=variant,
    )


def build_synchronizer(
    store: SnapshotStore, unit: str, *, variant: str | None = None
) -> SnapshotSynchronizer:
    """Build a synchronizer for one unit."""
    return SnapshotSynchronizer(store, unit, variant)


def bootstrap(settings: config.Settings | None = None) -> AppContainer:
    """Wire the application from `settings` (read from the environment by default).

    Raises:
        InvalidVariantError: If the configured variant is not a safe path component.
    """
    settings = settings or config.load_settings()
    validate_variant(settings.variant)
    return AppContainer(settings=settings, store=build_store(settings.snapshot_dir))
