"""Snapshot comparator.

A `SnapshotComparator` covers one run over one unit. Every call to `compare`
takes the next position of its label, checks the fresh text against the
stored record and returns an outcome. The store is read lazily on the first
batch-mode comparison and written only by `finish`:

- New records are appended (via `SnapshotSynchronizer.flush`).
- If anything mismatched, the full fresh snapshot set is kept as candidates
  for review; otherwise stale candidates are discarded.

A run that never reaches `finish` persists nothing.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from snapkeep.domain.errors import (
    MissingExpectedError,
    RunFinishedError,
    TransformNotIdempotentError,
    UnexpectedError,
)
from snapkeep.domain.models import SnapshotFile, SnapshotRecord, validate_unit
from snapkeep.domain.outcomes import (
    Match,
    Mismatch,
    New,
    Outcome,
    OutcomeKind,
    Preview,
)
from snapkeep.interfaces.execution_mode import ExecutionMode
from snapkeep.interfaces.snapshot_store import SnapshotStore
from snapkeep.interfaces.transform import Transform

from .synchronizer import SnapshotSynchronizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunReport:
    """Summary of a finished run.

    Attributes:
        unit: Unit the run covered.
        counts: Number of outcomes per kind.
        active_labels: Labels exercised by the run, in first-use order.
        observed: Number of snapshots taken per label.
        new_records: Records added to the store.
        mismatches: Mismatches left for review.
    """

    unit: str
    counts: dict[OutcomeKind, int]
    active_labels: tuple[str, ...] = ()
    new_records: tuple[SnapshotRecord, ...] = ()
    mismatches: tuple[Mismatch, ...] = ()
    observed: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when nothing mismatched."""
        return not self.mismatches

    def summary(self) -> str:
        """Return a one-line human summary with counts."""
        parts = [
            f"{self.counts.get(kind, 0)} {kind.value}"
            for kind in OutcomeKind
            if self.counts.get(kind, 0)
        ]
        return f"{self.unit}: " + (", ".join(parts) if parts else "no snapshots")


class SnapshotComparator:
    """Compares rendered text with the stored snapshots of one unit.

    Args:
        store: Snapshot store to read from and flush to.
        unit: Unit (snapshot file) the run covers.
        mode: Execution mode. Interactive runs never touch the store and
            only return `Preview` outcomes.
        transform: Optional idempotent text transform applied before every
            comparison (and therefore before anything is stored).
        variant: Optional variant namespace.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        store: SnapshotStore,
        unit: str,
        *,
        mode: ExecutionMode = ExecutionMode.BATCH,
        transform: Transform | None = None,
        variant: str | None = None,
    ) -> None:
        self.unit = validate_unit(unit)
        self.mode = mode
        self.variant = variant
        self._store = store
        self._transform = transform
        self._synchronizer = SnapshotSynchronizer(store, unit, variant)
        self._stored: SnapshotFile | None = None
        self._observed = SnapshotFile()
        self._pending: list[SnapshotRecord] = []
        self._outcomes: list[Outcome] = []
        self._finished = False

    # --- Properties ---

    @property
    def outcomes(self) -> list[Outcome]:
        """Outcomes of the run so far, in call order."""
        return list(self._outcomes)

    @property
    def active_labels(self) -> list[str]:
        """Labels compared during the run, in first-use order."""
        return self._observed.labels()

    @property
    def pending(self) -> list[SnapshotRecord]:
        """New records waiting for `finish`."""
        return list(self._pending)

    @property
    def finished(self) -> bool:
        """True once `finish` has run."""
        return self._finished

    # --- Comparison ---

    def compare(
        self, label: str, text: str, *, transform: Transform | None = None
    ) -> Outcome:
        """Compare freshly rendered `text` with the record at the next position.

        Args:
            label: Test-group label.
            text: Deterministic, human-readable rendering of the result.
            transform: Overrides the comparator transform for this call.

        Returns:
            Outcome: `Match`, `Mismatch` or `New` in batch mode; `Preview` in
            interactive mode.

        Raises:
            RunFinishedError: If the run was already finished.
            TransformNotIdempotentError: If the transform is not idempotent.
            SnapshotStoreError: If the stored file cannot be read.
        """
        if self._finished:
            raise RunFinishedError(self.unit)

        if transform is None:
            transform = self._transform
        text = self._apply_transform(label, text, transform)
        record = self._observed.append(label, text)

        outcome: Outcome
        if self.mode is ExecutionMode.INTERACTIVE:
            outcome = Preview(label=label, position=record.position, text=text)
            logger.warning(
                "Can't compare snapshots interactively; this is a preview, "
                "not a check.\n%s[%d]:\n%s",
                label,
                record.position,
                text,
            )
        else:
            old = self._load_stored().get(label, record.position)
            if old is None:
                outcome = New(label=label, position=record.position, text=text)
                self._pending.append(record)
                logger.warning(
                    "Adding new snapshot %s[%d] to %s",
                    label,
                    record.position,
                    self.unit,
                )
            elif old == text:
                outcome = Match(label=label, position=record.position, text=text)
                logger.debug("Snapshot %s[%d] matches", label, record.position)
            else:
                outcome = Mismatch(
                    label=label, position=record.position, old=old, new=text
                )
                logger.debug("Snapshot %s[%d] differs", label, record.position)

        self._outcomes.append(outcome)
        return outcome

    def compare_call(  # pylint: disable=too-many-arguments
        self,
        label: str,
        fn: Callable[[], Any],
        *,
        render: Callable[[Any], str] = str,
        error: bool = False,
        transform: Transform | None = None,
    ) -> Outcome:
        """Run `fn`, render what it returns (or raises) and compare it.

        Args:
            label: Test-group label.
            fn: The operation under test, called without arguments.
            render: Turns the return value into deterministic text.
            error: Whether `fn` is expected to raise. When True, the error
                is rendered as ``Error in <label>: <Type>: <message>``.
            transform: Overrides the comparator transform for this call.

        Raises:
            UnexpectedError: If `fn` raises while `error` is False.
            MissingExpectedError: If `fn` returns while `error` is True.
        """
        try:
            value = fn()
        except Exception as e:  # pylint: disable=broad-except
            if not error:
                logger.error("Unexpected error in %s: %s", label, e)
                raise UnexpectedError(label, e) from e
            return self.compare(label, render_error(label, e), transform=transform)
        if error:
            raise MissingExpectedError(label)
        return self.compare(label, render(value), transform=transform)

    # --- End of run ---

    def finish(self) -> RunReport:
        """Persist the run and return its report.

        New records are flushed. Mismatches are kept as candidates for
        review; a run without mismatches clears any stale candidates.
        Interactive runs write nothing.

        Raises:
            RunFinishedError: If called twice.
            SnapshotIOError: If the store cannot be written.
        """
        if self._finished:
            raise RunFinishedError(self.unit)

        mismatches = tuple(o for o in self._outcomes if isinstance(o, Mismatch))
        if self.mode is ExecutionMode.BATCH and self._observed:
            self._synchronizer.flush(self._pending)
            if mismatches:
                self._synchronizer.record_candidates(self._observed)
            else:
                self._synchronizer.discard_candidates()
        self._finished = True

        report = RunReport(
            unit=self.unit,
            counts=dict(Counter(o.kind for o in self._outcomes)),
            active_labels=tuple(self._observed.labels()),
            new_records=tuple(self._pending)
            if self.mode is ExecutionMode.BATCH
            else (),
            mismatches=mismatches,
            observed={
                label: len(self._observed.texts(label))
                for label in self._observed.labels()
            },
        )
        if report.new_records:
            logger.warning(
                "Added %d new snapshot(s) to %s; review them before committing.",
                len(report.new_records),
                self.unit,
            )
        if mismatches:
            logger.warning(
                "%d snapshot(s) in %s changed; run `snapkeep review %s`.",
                len(mismatches),
                self.unit,
                self.unit,
            )
        logger.info("Snapshot run finished: %s", report.summary())
        return report

    # --- Internal Helpers ---

    def _load_stored(self) -> SnapshotFile:
        if self._stored is None:
            self._stored = self._store.load(self.unit, self.variant)
        return self._stored

    @staticmethod
    def _apply_transform(label: str, text: str, transform: Transform | None) -> str:
        if transform is None:
            return text
        once = transform(text)
        twice = transform(once)
        if once != twice:
            raise TransformNotIdempotentError(label, once, twice)
        return once


def render_error(label: str, error: BaseException) -> str:
    """Render an expected error the way it appears in a snapshot."""
    return f"Error in {label}: {type(error).__name__}: {error}"
