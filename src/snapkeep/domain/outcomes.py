"""Comparison outcomes.

`compare` returns exactly one of these frozen dataclasses. They form a tagged
union (`Outcome`); callers dispatch with ``match``/``isinstance`` rather than
through methods on the outcome.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from enum import Enum


class OutcomeKind(Enum):
    """Tag of a comparison outcome."""

    MATCH = "match"
    MISMATCH = "mismatch"
    NEW = "new"
    PREVIEW = "preview"


@dataclass(frozen=True)
class Match:
    """The fresh text is identical to the stored record."""

    label: str
    position: int
    text: str

    kind = OutcomeKind.MATCH


@dataclass(frozen=True)
class Mismatch:
    """The fresh text differs from the stored record."""

    label: str
    position: int
    old: str
    new: str

    kind = OutcomeKind.MISMATCH

    def diff(self) -> str:
        """Return a unified diff from the stored text to the fresh text."""
        return unified_diff(self.old, self.new, self.label, self.position)


@dataclass(frozen=True)
class New:
    """No record existed; the text is queued to be stored at end of run."""

    label: str
    position: int
    text: str

    kind = OutcomeKind.NEW


@dataclass(frozen=True)
class Preview:
    """Interactive mode: the text that would be snapshotted. Not a real check."""

    label: str
    position: int
    text: str

    kind = OutcomeKind.PREVIEW


Outcome = Match | Mismatch | New | Preview


NO_NEWLINE_MARKER = "\\ No newline at end of file"
CARRIAGE_RETURN_MARKER = "^M"


def _diff_lines(text: str, mark_missing_newline: bool) -> list[str]:
    *lines, last = text.split("\n")
    if last:
        lines.append(last)
    shown = [
        line[:-1] + CARRIAGE_RETURN_MARKER if line.endswith("\r") else line
        for line in lines
    ]
    if last and mark_missing_newline:
        shown[-1] += f"\n{NO_NEWLINE_MARKER}"
    return shown


def unified_diff(old: str, new: str, label: str, position: int) -> str:
    """Render a unified diff between two snapshot texts.

    Line endings stay visible: a carriage return shows as ``^M`` and, when
    only one side ends with a newline, the other side's last line carries
    git's ``\\ No newline at end of file`` marker.
    """
    name = f"{label}[{position}]"
    mark = old.endswith("\n") != new.endswith("\n")
    return "\n".join(
        difflib.unified_diff(
            _diff_lines(old, mark),
            _diff_lines(new, mark),
            fromfile=f"{name} (stored)",
            tofile=f"{name} (fresh)",
            lineterm="",
        )
    )
