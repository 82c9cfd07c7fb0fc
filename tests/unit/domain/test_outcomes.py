"""Unit tests for comparison outcomes and their diffs."""

import dataclasses

import pytest

from snapkeep.domain.outcomes import (
    Match,
    Mismatch,
    New,
    OutcomeKind,
    Preview,
    unified_diff,
)


@pytest.mark.parametrize(
    "outcome, kind",
    [
        (Match("basic", 1, "aaa"), OutcomeKind.MATCH),
        (Mismatch("basic", 1, "aaa", "aab"), OutcomeKind.MISMATCH),
        (New("basic", 1, "aaa"), OutcomeKind.NEW),
        (Preview("basic", 1, "aaa"), OutcomeKind.PREVIEW),
    ],
)
def test_outcome_kind_tags(outcome, kind):
    """Every outcome carries its kind tag."""
    assert outcome.kind is kind


def test_outcomes_are_frozen():
    """Outcomes are immutable values."""
    outcome = Match("basic", 1, "aaa")
    with pytest.raises(dataclasses.FrozenInstanceError):
        outcome.text = "changed"  # type: ignore[misc]


def test_mismatch_diff_names_the_record():
    """The diff headers identify label, position and which side is which."""
    diff = Mismatch("basic", 2, "aaa\nkeep", "aab\nkeep").diff()
    lines = diff.splitlines()
    assert lines[0] == "--- basic[2] (stored)"
    assert lines[1] == "+++ basic[2] (fresh)"
    assert "-aaa" in lines
    assert "+aab" in lines
    assert " keep" in lines


def test_unified_diff_of_identical_texts_is_empty():
    """No diff lines for equal texts."""
    assert unified_diff("same", "same", "basic", 1) == ""


def test_diff_shows_missing_trailing_newline():
    """Texts differing only in the final newline still produce a diff."""
    diff = Mismatch("basic", 1, "aaa", "aaa\n").diff()
    assert diff.splitlines()[3:] == [
        "-aaa",
        "\\ No newline at end of file",
        "+aaa",
    ]


def test_diff_shows_carriage_returns():
    """CRLF against LF endings is visible as ``^M``."""
    diff = unified_diff("a\r\nb\r\n", "a\nb\n", "basic", 1)
    assert "-a^M" in diff.splitlines()
    assert "+a" in diff.splitlines()
    assert "No newline" not in diff


@pytest.mark.parametrize(
    "old, new",
    [("", "\n"), ("x\n", "x\n\n"), ("x\r", "x"), ("x", "x\n\n")],
)
def test_every_mismatch_has_a_diff(old, new):
    """Any two different texts render a non-empty diff."""
    assert Mismatch("basic", 1, old, new).diff()
