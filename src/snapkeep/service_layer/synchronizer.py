"""Snapshot file synchronizer.

Reconciles what a run observed with what the store holds, and exposes the
review workflow:

- `flush` appends the New records of a run.
- `record_candidates` keeps the fresh snapshots of a run with mismatches.
- `review` lists mismatches; `accept` and `reject` settle them.
- `prune` and `prune_units` drop snapshots whose tests are gone; `trim`
  drops trailing positions a passing test no longer produces.

Mutating operations other than `flush` are meant to run between test runs,
never while a comparator for the same unit is active.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from snapkeep.domain.models import SnapshotFile, SnapshotRecord
from snapkeep.domain.outcomes import unified_diff
from snapkeep.interfaces.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewItem:
    """One mismatched record awaiting a decision."""

    label: str
    position: int
    old: str
    new: str

    def diff(self) -> str:
        """Return a unified diff from the stored text to the candidate text."""
        return unified_diff(self.old, self.new, self.label, self.position)


class SnapshotSynchronizer:
    """Keeps the stored snapshots of one unit in step with its tests.

    Args:
        store: The snapshot store.
        unit: Unit whose snapshot file is managed.
        variant: Optional variant namespace.
    """

    def __init__(
        self, store: SnapshotStore, unit: str, variant: str | None = None
    ) -> None:
        self.store = store
        self.unit = unit
        self.variant = variant

    # --- End of run ---

    def flush(self, pending_new_records: Iterable[SnapshotRecord]) -> int:
        """Append New records under their label, in insertion order.

        The stored file is re-read first so that only the new records are
        added to whatever is on disk.

        Returns:
            int: Number of records written.

        Raises:
            SnapshotIOError: If the file cannot be read or written.
            RecordPositionError: If a record does not extend its label.
        """
        records = list(pending_new_records)
        if not records:
            return 0
        snapshot_file = self.store.load(self.unit, self.variant)
        for record in records:
            snapshot_file.add(record)
        self.store.save(self.unit, snapshot_file, self.variant)
        logger.info(
            "Added %d new snapshot(s) to %s: %s",
            len(records),
            self.unit,
            ", ".join(f"{r.label}[{r.position}]" for r in records),
        )
        return len(records)

    def record_candidates(self, observed: SnapshotFile) -> None:
        """Store the full set of snapshots observed by a run for review."""
        self.store.save_candidates(self.unit, observed, self.variant)
        logger.debug(
            "Recorded %d candidate snapshot(s) for %s", len(observed), self.unit
        )

    def discard_candidates(self) -> None:
        """Forget any candidate snapshots of the unit."""
        self.store.discard_candidates(self.unit, self.variant)

    # --- Review ---

    def review(self, label: str) -> list[ReviewItem]:
        """Return every mismatch under `label`; does not modify anything."""
        stored = self.store.load(self.unit, self.variant)
        candidates = self.store.load_candidates(self.unit, self.variant)
        return self._mismatches(stored, candidates, label)

    def pending_labels(self) -> list[str]:
        """Return the labels that have at least one mismatch, in candidate order."""
        stored = self.store.load(self.unit, self.variant)
        candidates = self.store.load_candidates(self.unit, self.variant)
        return [
            label
            for label in candidates.labels()
            if self._mismatches(stored, candidates, label)
        ]

    def accept(self, label: str) -> int:
        """Replace every mismatched record under `label` with its fresh text.

        The label is then dropped from the candidate file, which is removed
        once no mismatch is left. Irreversible outside version control.

        Returns:
            int: Number of records replaced.
        """
        stored = self.store.load(self.unit, self.variant)
        candidates = self.store.load_candidates(self.unit, self.variant)
        items = self._mismatches(stored, candidates, label)
        for item in items:
            stored.replace(item.label, item.position, item.new)
        if items:
            self.store.save(self.unit, stored, self.variant)
            logger.info(
                "Accepted %d snapshot(s) for %s in %s", len(items), label, self.unit
            )
        self._drop_candidate_label(stored, candidates, label)
        return len(items)

    def reject(self, label: str) -> int:
        """Drop the pending mismatches under `label`, keeping the stored text.

        Returns:
            int: Number of mismatches discarded.
        """
        stored = self.store.load(self.unit, self.variant)
        candidates = self.store.load_candidates(self.unit, self.variant)
        items = self._mismatches(stored, candidates, label)
        if items:
            logger.info(
                "Rejected %d snapshot(s) for %s in %s", len(items), label, self.unit
            )
        self._drop_candidate_label(stored, candidates, label)
        return len(items)

    # --- Pruning ---

    def prune(self, active_labels: Iterable[str]) -> list[str]:
        """Remove records whose label is not in `active_labels`.

        Applies to the stored file and the candidate file alike; records
        under active labels are left untouched.

        Returns:
            list[str]: The removed labels, in file order.
        """
        active = set(active_labels)
        stored = self.store.load(self.unit, self.variant)
        removed = [label for label in stored.labels() if label not in active]
        for label in removed:
            stored.remove_label(label)
        if removed:
            self.store.save(self.unit, stored, self.variant)
            logger.info(
                "Pruned %d stale label(s) from %s: %s",
                len(removed),
                self.unit,
                ", ".join(removed),
            )

        candidates = self.store.load_candidates(self.unit, self.variant)
        stale = [label for label in candidates.labels() if label not in active]
        for label in stale:
            candidates.remove_label(label)
        if stale:
            self.store.save_candidates(self.unit, candidates, self.variant)
        return removed

    def trim(self, observed: Mapping[str, int]) -> int:
        """Drop stored records beyond the number of snapshots each label produced.

        Only pass labels whose test ran to completion; a label observed zero
        times loses all of its records.

        Returns:
            int: Number of records removed.
        """
        stored = self.store.load(self.unit, self.variant)
        dropped = sum(
            stored.truncate(label, count) for label, count in observed.items()
        )
        if dropped:
            self.store.save(self.unit, stored, self.variant)
            logger.info(
                "Trimmed %d trailing snapshot(s) from %s", dropped, self.unit
            )
        return dropped

    # --- Internal Helpers ---

    def _drop_candidate_label(
        self, stored: SnapshotFile, candidates: SnapshotFile, label: str
    ) -> None:
        if not candidates.remove_label(label):
            return
        if any(
            self._mismatches(stored, candidates, other)
            for other in candidates.labels()
        ):
            self.store.save_candidates(self.unit, candidates, self.variant)
        else:
            self.store.discard_candidates(self.unit, self.variant)

    @staticmethod
    def _mismatches(
        stored: SnapshotFile, candidates: SnapshotFile, label: str
    ) -> list[ReviewItem]:
        items = []
        for position, new in enumerate(candidates.texts(label), start=1):
            old = stored.get(label, position)
            if old is not None and old != new:
                items.append(
                    ReviewItem(label=label, position=position, old=old, new=new)
                )
        return items


def prune_units(
    store: SnapshotStore, active_units: Iterable[str], variant: str | None = None
) -> list[str]:
    """Delete the snapshot files of units that no longer exist.

    Returns:
        list[str]: The removed units, sorted.
    """
    active = set(active_units)
    known = set(store.units(variant)) | set(store.candidate_units(variant))
    removed = sorted(known - active)
    for unit in removed:
        store.delete(unit, variant)
    if removed:
        logger.info(
            "Removed snapshot files of %d stale unit(s): %s",
            len(removed),
            ", ".join(removed),
        )
    return removed
