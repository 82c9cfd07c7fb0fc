"""Snapshot data model.

A `SnapshotFile` is the in-memory form of one unit's snapshots: an ordered
mapping from label to the ordered texts recorded under it. Positions are
1-based and contiguous, so `(label, position)` identifies at most one record.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .errors import (
    InvalidLabelError,
    InvalidUnitError,
    InvalidVariantError,
    RecordPositionError,
)

VARIANT_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def validate_label(label: str) -> str:
    """Return `label` unchanged if it can be used as a section heading.

    Raises:
        InvalidLabelError: If the label is empty, spans lines or carries
            leading/trailing whitespace.
    """
    if not label or label != label.strip() or "\n" in label or "\r" in label:
        raise InvalidLabelError(label)
    return label


def validate_unit(unit: str) -> str:
    """Return `unit` unchanged if it can name a snapshot file.

    Enforced:
    - Non-empty, single line
    - No path separators, not "." or ".."
    - Not ending in ".new", which marks candidate files
    """
    if (
        not unit
        or unit in {".", ".."}
        or any(ch in unit for ch in "/\\\n\r")
        or unit.endswith(".new")
    ):
        raise InvalidUnitError(unit)
    return unit


def validate_variant(variant: str | None) -> str | None:
    """Return `variant` unchanged if it is None or a safe path component.

    Raises:
        InvalidVariantError: If the variant contains separators or dots only.
    """
    if variant is None:
        return None
    if not VARIANT_PATTERN.match(variant):
        raise InvalidVariantError(variant)
    return variant


@dataclass(frozen=True)
class SnapshotRecord:
    """A single stored or observed snapshot.

    Attributes:
        label: The test-group label the record belongs to.
        position: 1-based sequence position within the label.
        text: The rendered text.
    """

    label: str
    position: int
    text: str

    @property
    def key(self) -> tuple[str, int]:
        """Return the record identity ``(label, position)``."""
        return (self.label, self.position)


class SnapshotFile:
    """Ordered label -> texts mapping for one unit.

    Records can only be appended at the next free position of a label or
    replaced in place, which keeps identities unique.
    """

    def __init__(self, sections: dict[str, list[str]] | None = None) -> None:
        self._sections: dict[str, list[str]] = {}
        for label, texts in (sections or {}).items():
            for text in texts:
                self.append(label, text)

    @classmethod
    def from_records(cls, records: Iterable[SnapshotRecord]) -> SnapshotFile:
        """Build a file from records, enforcing position order."""
        snapshot_file = cls()
        for record in records:
            snapshot_file.add(record)
        return snapshot_file

    # --- Queries ---

    def labels(self) -> list[str]:
        """Return labels in file order."""
        return list(self._sections)

    def texts(self, label: str) -> list[str]:
        """Return a copy of the texts under `label` (empty if absent)."""
        return list(self._sections.get(label, ()))

    def get(self, label: str, position: int) -> str | None:
        """Return the text at `(label, position)` or None if there is none."""
        texts = self._sections.get(label)
        if texts is None or not 1 <= position <= len(texts):
            return None
        return texts[position - 1]

    def records(self) -> Iterator[SnapshotRecord]:
        """Yield every record in file order."""
        for label, texts in self._sections.items():
            for index, text in enumerate(texts, start=1):
                yield SnapshotRecord(label=label, position=index, text=text)

    def __contains__(self, label: object) -> bool:
        return label in self._sections

    def __len__(self) -> int:
        return sum(len(texts) for texts in self._sections.values())

    def __bool__(self) -> bool:
        return bool(self._sections)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SnapshotFile):
            return NotImplemented
        # label order is part of the persisted form
        return list(self._sections.items()) == list(other._sections.items())

    def __repr__(self) -> str:
        return f"SnapshotFile({self._sections!r})"

    # --- Mutations ---

    def append(self, label: str, text: str) -> SnapshotRecord:
        """Append `text` at the next position of `label` and return the record."""
        texts = self._sections.setdefault(validate_label(label), [])
        texts.append(text)
        return SnapshotRecord(label=label, position=len(texts), text=text)

    def add(self, record: SnapshotRecord) -> None:
        """Add `record`, which must sit at the next free position of its label.

        Raises:
            RecordPositionError: If the position is already taken or leaves a gap.
        """
        expected = len(self._sections.get(record.label, ())) + 1
        if record.position != expected:
            raise RecordPositionError(record.label, record.position, expected)
        self.append(record.label, record.text)

    def replace(self, label: str, position: int, text: str) -> None:
        """Overwrite an existing record.

        Raises:
            KeyError: If there is no record at `(label, position)`.
        """
        if self.get(label, position) is None:
            raise KeyError((label, position))
        self._sections[label][position - 1] = text

    def remove_label(self, label: str) -> bool:
        """Remove every record under `label`; return True if anything was removed."""
        return self._sections.pop(label, None) is not None

    def truncate(self, label: str, count: int) -> int:
        """Keep the first `count` records of `label`; return how many were dropped.

        A `count` of zero removes the label.
        """
        texts = self._sections.get(label)
        if texts is None or len(texts) <= count:
            return 0
        dropped = len(texts) - count
        if count <= 0:
            del self._sections[label]
        else:
            del texts[count:]
        return dropped

    def copy(self) -> SnapshotFile:
        """Return an independent copy."""
        return SnapshotFile(
            {label: list(texts) for label, texts in self._sections.items()}
        )
