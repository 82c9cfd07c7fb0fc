"""Snapshot store interface.

A store persists one `SnapshotFile` per unit (a logical test-source unit,
typically a test module) and, next to it, an optional candidate file that
holds the freshly observed snapshots of a run that produced mismatches.

Key concepts:
    - **Unit**: the name a snapshot file is stored under.
    - **Variant**: an optional namespace (OS, dependency version, ...) that
      keeps an independent set of units.
    - **Candidate**: fresh snapshots awaiting review; replaced wholesale on
      every run with mismatches, and never read by the comparator.

Errors:
    Implementations raise `SnapshotIOError` for I/O failures and
    `SnapshotFormatError` for unreadable content. Both are fatal to a run.
"""

import abc

from snapkeep.domain.models import SnapshotFile


class SnapshotStore(abc.ABC):
    """Abstract base class for snapshot persistence."""

    # --- Stored snapshots ---

    @abc.abstractmethod
    def load(self, unit: str, variant: str | None = None) -> SnapshotFile:
        """Load the stored snapshots of `unit`.

        Args:
            unit: Unit name.
            variant: Optional variant namespace.

        Returns:
            SnapshotFile: The stored snapshots; empty if none exist yet.

        Raises:
            SnapshotIOError: If the file exists but cannot be read.
            SnapshotFormatError: If the file content is malformed.
        """

    @abc.abstractmethod
    def save(
        self, unit: str, snapshot_file: SnapshotFile, variant: str | None = None
    ) -> None:
        """Persist `snapshot_file` as the stored snapshots of `unit`.

        Saving an empty file removes the unit.

        Raises:
            SnapshotIOError: If the file cannot be written.
        """

    @abc.abstractmethod
    def delete(self, unit: str, variant: str | None = None) -> bool:
        """Remove the unit and its candidate file.

        Returns:
            bool: True if anything was removed.
        """

    @abc.abstractmethod
    def units(self, variant: str | None = None) -> list[str]:
        """Return the sorted names of all units with stored snapshots."""

    # --- Candidate snapshots ---

    @abc.abstractmethod
    def load_candidates(self, unit: str, variant: str | None = None) -> SnapshotFile:
        """Load the candidate snapshots of `unit`; empty if there are none."""

    @abc.abstractmethod
    def save_candidates(
        self, unit: str, snapshot_file: SnapshotFile, variant: str | None = None
    ) -> None:
        """Replace the candidate snapshots of `unit`.

        Saving an empty file removes the candidate file.
        """

    @abc.abstractmethod
    def candidate_units(self, variant: str | None = None) -> list[str]:
        """Return the sorted names of units that have a candidate file."""

    # --- Convenience methods (non-abstract) ---

    def exists(self, unit: str, variant: str | None = None) -> bool:
        """Return True if `unit` has stored snapshots."""
        return unit in self.units(variant)

    def discard_candidates(self, unit: str, variant: str | None = None) -> None:
        """Remove the candidate file of `unit` if it exists."""
        self.save_candidates(unit, SnapshotFile(), variant)
