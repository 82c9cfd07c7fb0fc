"""Domain-layer error definitions.

Comparison outcomes (match, mismatch, new) are values, not errors; see
`snapkeep.domain.outcomes`. The errors below are raised when something is
wrong with the store, the caller's input, or the operation under test.
"""

from __future__ import annotations

from pathlib import Path


class SnapshotError(Exception):
    """Base class for all SNAPKEEP errors."""


# ============================================================================
#                           Record / file errors
# ============================================================================


class InvalidLabelError(SnapshotError, ValueError):
    """Raised when a label cannot be stored as a snapshot heading."""

    def __init__(self, label: str) -> None:
        super().__init__(
            f"Invalid snapshot label {label!r}: labels must be non-empty, "
            "single-line and free of surrounding whitespace."
        )
        self.label = label


class InvalidUnitError(SnapshotError, ValueError):
    """Raised when a unit name cannot be used as a snapshot file name."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"Invalid snapshot unit {unit!r}.")
        self.unit = unit


class InvalidVariantError(SnapshotError, ValueError):
    """Raised when a variant name is not usable as a single path component."""

    def __init__(self, variant: str) -> None:
        super().__init__(f"Invalid snapshot variant {variant!r}.")
        self.variant = variant


class RecordPositionError(SnapshotError):
    """Raised when a record would break the 1..n position sequence of a label."""

    def __init__(self, label: str, position: int, expected: int) -> None:
        super().__init__(
            f"Cannot add record {label!r}[{position}]: next position is {expected}."
        )
        self.label = label
        self.position = position
        self.expected = expected


# ============================================================================
#                               Store errors
# ============================================================================


class SnapshotStoreError(SnapshotError):
    """Base class for errors raised while reading or writing a snapshot store.

    These are fatal to a run: without a trustworthy store no comparison can
    be relied upon.
    """


class SnapshotIOError(SnapshotStoreError):
    """Raised when a snapshot file cannot be read or written."""

    def __init__(self, path: Path | str, action: str) -> None:
        super().__init__(f"Could not {action} snapshot file {str(path)!r}.")
        self.path = path
        self.action = action


class SnapshotFormatError(SnapshotStoreError):
    """Raised when a snapshot file does not follow the snapshot format."""

    def __init__(self, message: str, lineno: int, source: str | None = None) -> None:
        where = f"{source}:{lineno}" if source else f"line {lineno}"
        super().__init__(f"{where}: {message}")
        self.lineno = lineno
        self.source = source


# ============================================================================
#                            Comparator errors
# ============================================================================


class TransformNotIdempotentError(SnapshotError):
    """Raised when applying the transform twice changes the text again."""

    def __init__(self, label: str, once: str, twice: str) -> None:
        super().__init__(
            f"Transform for {label!r} is not idempotent; repeated runs would "
            "never produce a stable snapshot."
        )
        self.label = label
        self.once = once
        self.twice = twice


class UnexpectedError(SnapshotError):
    """Raised when the operation under test fails while errors are disallowed.

    The original exception is available as ``__cause__`` and ``error``.
    """

    def __init__(self, label: str, error: BaseException) -> None:
        super().__init__(
            f"Unexpected error in {label!r}: {type(error).__name__}: {error}"
        )
        self.label = label
        self.error = error


class MissingExpectedError(SnapshotError):
    """Raised when an operation was expected to fail but returned normally."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Expected {label!r} to raise an error, but it did not.")
        self.label = label


class RunFinishedError(SnapshotError):
    """Raised when a comparator is used after its run was finished."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"The snapshot run for unit {unit!r} is already finished.")
        self.unit = unit
