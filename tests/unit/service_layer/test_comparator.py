"""Unit tests for `SnapshotComparator` against the in-memory store.

Covers the run lifecycle: lazy loading, outcome per call, the deferred
flush of new records, candidate bookkeeping for mismatches, interactive
previews, transforms and the error-capturing `compare_call`.
"""

from __future__ import annotations

import pytest

from snapkeep.adapters.snapshot_store import MemorySnapshotStore
from snapkeep.domain.errors import (
    InvalidUnitError,
    MissingExpectedError,
    RunFinishedError,
    TransformNotIdempotentError,
    UnexpectedError,
)
from snapkeep.domain.models import SnapshotFile, SnapshotRecord
from snapkeep.domain.outcomes import Match, Mismatch, New, OutcomeKind, Preview
from snapkeep.interfaces.execution_mode import ExecutionMode
from snapkeep.service_layer.comparator import SnapshotComparator, render_error

# pylint: disable=redefined-outer-name

UNIT = "basics"


# ============================================================================
#                               Helpers
# ============================================================================


class CountingStore(MemorySnapshotStore):
    """Memory store that counts loads and saves of stored snapshot files."""

    def __init__(self) -> None:
        super().__init__()
        self.loads = 0
        self.saves = 0

    def load(self, unit, variant=None):
        self.loads += 1
        return super().load(unit, variant)

    def save(self, unit, snapshot_file, variant=None):
        self.saves += 1
        super().save(unit, snapshot_file, variant)


@pytest.fixture
def store() -> CountingStore:
    """A fresh counting store."""
    return CountingStore()


def run(store, *pairs, mode=ExecutionMode.BATCH, transform=None):
    """Compare `(label, text)` pairs in one run and finish it."""
    comparator = SnapshotComparator(store, UNIT, mode=mode, transform=transform)
    outcomes = [comparator.compare(label, text) for label, text in pairs]
    return outcomes, comparator.finish()


# ============================================================================
#                           Batch mode outcomes
# ============================================================================


def test_first_run_records_new_snapshot(store):
    """Nothing stored: the outcome is New and the record is written at finish."""
    (outcome,), report = run(store, ("basic", "aaa"))

    assert outcome == New(label="basic", position=1, text="aaa")
    assert store.load(UNIT) == SnapshotFile({"basic": ["aaa"]})
    assert report.new_records == (SnapshotRecord("basic", 1, "aaa"),)
    assert report.ok


def test_second_run_matches(store):
    """The same text on the next run is a Match and writes nothing."""
    run(store, ("basic", "aaa"))
    before = store.raw(UNIT)

    (outcome,), report = run(store, ("basic", "aaa"))

    assert isinstance(outcome, Match)
    assert store.raw(UNIT) == before
    assert report.counts == {OutcomeKind.MATCH: 1}
    assert not report.new_records


def test_changed_text_is_mismatch_and_store_untouched(store):
    """A different text is a Mismatch; the stored text is kept for review."""
    run(store, ("basic", "aaa"))

    (outcome,), report = run(store, ("basic", "aab"))

    assert outcome == Mismatch(label="basic", position=1, old="aaa", new="aab")
    assert store.load(UNIT).get("basic", 1) == "aaa"
    assert store.load_candidates(UNIT) == SnapshotFile({"basic": ["aab"]})
    assert report.mismatches == (outcome,)
    assert not report.ok


def test_positions_are_per_label(store):
    """Repeated labels take consecutive positions; labels are independent."""
    outcomes, _ = run(store, ("a", "1"), ("b", "2"), ("a", "3"))
    assert [(o.label, o.position) for o in outcomes] == [("a", 1), ("b", 1), ("a", 2)]
    assert store.load(UNIT) == SnapshotFile({"a": ["1", "3"], "b": ["2"]})


def test_extra_record_under_existing_label_is_new(store):
    """A position past the stored ones is New even when the label exists."""
    run(store, ("basic", "aaa"))

    outcomes, _ = run(store, ("basic", "aaa"), ("basic", "bbb"))

    assert [type(o) for o in outcomes] == [Match, New]
    assert store.load(UNIT).texts("basic") == ["aaa", "bbb"]


def test_new_and_mismatch_in_one_run(store):
    """New records are flushed even when another record mismatched."""
    run(store, ("a", "1"))

    outcomes, report = run(store, ("a", "changed"), ("b", "fresh"))

    assert [type(o) for o in outcomes] == [Mismatch, New]
    assert store.load(UNIT) == SnapshotFile({"a": ["1"], "b": ["fresh"]})
    assert report.summary() == f"{UNIT}: 1 mismatch, 1 new"


def test_deterministic_reruns_settle(store):
    """Deterministic output settles after the first run: no further writes."""
    pairs = [("a", "x"), ("a", "y"), ("b", "z")]
    run(store, *pairs)
    saves = store.saves

    for _ in range(3):
        outcomes, _ = run(store, *pairs)
        assert all(isinstance(o, Match) for o in outcomes)
    assert store.saves == saves


def test_store_is_loaded_lazily_and_once(store):
    """The stored file is read on the first comparison only."""
    comparator = SnapshotComparator(store, UNIT)
    assert store.loads == 0
    comparator.compare("a", "1")
    comparator.compare("a", "2")
    comparator.compare("b", "3")
    assert store.loads == 1


def test_nothing_persists_before_finish(store):
    """New records stay pending until `finish`."""
    comparator = SnapshotComparator(store, UNIT)
    comparator.compare("basic", "aaa")

    assert comparator.pending == [SnapshotRecord("basic", 1, "aaa")]
    assert store.saves == 0
    assert not store.exists(UNIT)


def test_clean_run_discards_stale_candidates(store):
    """A run without mismatches forgets candidates from an earlier run."""
    run(store, ("basic", "aaa"))
    run(store, ("basic", "aab"))
    assert store.candidate_units() == [UNIT]

    run(store, ("basic", "aaa"))

    assert store.candidate_units() == []


def test_empty_run_touches_nothing(store):
    """Finishing a run without comparisons writes nothing."""
    report = SnapshotComparator(store, UNIT).finish()
    assert store.saves == 0
    assert report.summary() == f"{UNIT}: no snapshots"


def test_run_bookkeeping_properties(store):
    """`outcomes` and `active_labels` reflect the calls made so far."""
    comparator = SnapshotComparator(store, UNIT)
    comparator.compare("b", "1")
    comparator.compare("a", "2")
    comparator.compare("b", "3")

    assert comparator.active_labels == ["b", "a"]
    assert len(comparator.outcomes) == 3
    assert not comparator.finished
    report = comparator.finish()
    assert comparator.finished
    assert report.active_labels == ("b", "a")
    assert report.observed == {"b": 2, "a": 1}


def test_variant_is_separate_namespace(store):
    """Snapshots of a variant do not mix with the default ones."""
    default = SnapshotComparator(store, UNIT)
    default.compare("basic", "plain")
    default.finish()

    variant = SnapshotComparator(store, UNIT, variant="win")
    outcome = variant.compare("basic", "windows")
    variant.finish()

    assert isinstance(outcome, New)
    assert store.load(UNIT).texts("basic") == ["plain"]
    assert store.load(UNIT, "win").texts("basic") == ["windows"]


# ============================================================================
#                           Lifecycle errors
# ============================================================================


def test_compare_after_finish_fails(store):
    """A finished run rejects further comparisons and a second finish."""
    comparator = SnapshotComparator(store, UNIT)
    comparator.finish()
    with pytest.raises(RunFinishedError):
        comparator.compare("basic", "aaa")
    with pytest.raises(RunFinishedError):
        comparator.finish()


def test_invalid_unit_rejected(store):
    """Units are validated when the comparator is created."""
    with pytest.raises(InvalidUnitError):
        SnapshotComparator(store, "../escape")


# ============================================================================
#                           Interactive mode
# ============================================================================


def test_interactive_mode_previews_without_io(store):
    """Interactive runs return previews and never read or write the store."""
    store.save(UNIT, SnapshotFile({"basic": ["stored"]}))
    store.loads = store.saves = 0

    outcomes, report = run(
        store, ("basic", "fresh"), ("basic", "more"), mode=ExecutionMode.INTERACTIVE
    )

    assert outcomes == [Preview("basic", 1, "fresh"), Preview("basic", 2, "more")]
    assert store.loads == 0
    assert store.saves == 0
    assert report.counts == {OutcomeKind.PREVIEW: 2}
    assert not report.new_records


def test_interactive_mode_logs_preview(store, caplog):
    """The preview is logged with a warning that it is not a check."""
    comparator = SnapshotComparator(store, UNIT, mode=ExecutionMode.INTERACTIVE)
    with caplog.at_level("WARNING"):
        comparator.compare("basic", "fresh")
    assert "preview" in caplog.text
    assert "fresh" in caplog.text


# ============================================================================
#                               Transforms
# ============================================================================


def test_transform_applies_before_compare_and_store(store):
    """Stored text is the transformed text, so volatile parts never differ."""
    scrub = lambda s: s.replace("/tmp/abc", "<tmp>")  # noqa: E731
    other = lambda s: s.replace("/tmp/xyz", "<tmp>")  # noqa: E731

    run(store, ("paths", "at /tmp/abc"), transform=scrub)
    (outcome,), _ = run(store, ("paths", "at /tmp/xyz"), transform=other)

    assert store.load(UNIT).get("paths", 1) == "at <tmp>"
    assert isinstance(outcome, Match)


def test_per_call_transform_overrides_default(store):
    """A transform given to `compare` replaces the comparator's transform."""
    comparator = SnapshotComparator(store, UNIT, transform=str.upper)
    outcome = comparator.compare("basic", "Mixed", transform=str.lower)
    assert outcome.text == "mixed"


def test_non_idempotent_transform_is_rejected(store):
    """A transform that keeps changing its own output fails loudly."""
    comparator = SnapshotComparator(store, UNIT, transform=lambda s: s + "!")
    with pytest.raises(TransformNotIdempotentError) as excinfo:
        comparator.compare("basic", "aaa")
    assert excinfo.value.once == "aaa!"
    assert excinfo.value.twice == "aaa!!"


# ============================================================================
#                               compare_call
# ============================================================================


def test_compare_call_renders_return_value(store):
    """The rendered return value is compared."""
    comparator = SnapshotComparator(store, UNIT)
    outcome = comparator.compare_call("sum", lambda: [1, 2], render=repr)
    assert outcome.text == "[1, 2]"


def test_compare_call_expected_error_is_snapshotted(store):
    """An expected error is rendered into the snapshot text."""
    comparator = SnapshotComparator(store, UNIT)

    def boom():
        raise ValueError("bad input")

    outcome = comparator.compare_call("parse", boom, error=True)

    assert outcome.text == "Error in parse: ValueError: bad input"
    assert outcome.text == render_error("parse", ValueError("bad input"))


def test_compare_call_unexpected_error(store):
    """An error while errors are disallowed aborts with the cause attached."""
    comparator = SnapshotComparator(store, UNIT)
    cause = KeyError("k")

    def boom():
        raise cause

    with pytest.raises(UnexpectedError) as excinfo:
        comparator.compare_call("lookup", boom)
    assert excinfo.value.__cause__ is cause
    assert excinfo.value.error is cause
    assert comparator.outcomes == []


def test_compare_call_missing_expected_error(store):
    """Returning normally when an error was expected is an error."""
    comparator = SnapshotComparator(store, UNIT)
    with pytest.raises(MissingExpectedError):
        comparator.compare_call("parse", lambda: "fine", error=True)
