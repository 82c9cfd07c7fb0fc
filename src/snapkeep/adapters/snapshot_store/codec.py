"""Markdown codec for snapshot files.

Layout::

    # basic

        aaa

    ---

        second record

    # other label

        ccc

- ``# <label>`` opens a section.
- Every line of a record is indented by four spaces, empty lines included,
  so text (trailing newlines too) survives a round trip exactly.
- ``---`` separates records within a section.
- Unindented blank lines are framing only.
"""

from __future__ import annotations

from snapkeep.domain.errors import InvalidLabelError, SnapshotFormatError
from snapkeep.domain.models import SnapshotFile, validate_label

HEADING_PREFIX = "# "
SEPARATOR = "---"
INDENT = "    "


def _indent(text: str) -> str:
    return "\n".join(INDENT + line for line in text.split("\n"))


def dumps(snapshot_file: SnapshotFile) -> str:
    """Serialize `snapshot_file` to the markdown snapshot format.

    An empty file serializes to the empty string.
    """
    sections: list[str] = []
    for label in snapshot_file.labels():
        records = [_indent(text) for text in snapshot_file.texts(label)]
        body = f"\n\n{SEPARATOR}\n\n".join(records)
        sections.append(f"{HEADING_PREFIX}{label}\n\n{body}")
    if not sections:
        return ""
    return "\n\n".join(sections) + "\n"


def loads(  # pylint: disable=too-many-branches
    content: str, source: str | None = None
) -> SnapshotFile:
    """Parse markdown snapshot content.

    Args:
        content: File content.
        source: Optional file name used in error messages.

    Returns:
        SnapshotFile: The parsed snapshots.

    Raises:
        SnapshotFormatError: On stray text, records outside a section,
            sections or separators without a record, or duplicate headings.
    """
    snapshot_file = SnapshotFile()
    label: str | None = None
    buffer: list[str] | None = None
    # line number of a heading/separator still waiting for its record
    open_marker = 0

    for lineno, line in enumerate(content.split("\n"), start=1):
        if line.startswith(INDENT):
            if label is None:
                raise SnapshotFormatError("record outside of a section", lineno, source)
            if buffer is None:
                buffer = []
            buffer.append(line[len(INDENT) :])
            open_marker = 0
            continue

        if not line.strip():
            continue

        if open_marker:
            raise SnapshotFormatError("expected a record", open_marker, source)

        if buffer is not None:
            assert label is not None
            snapshot_file.append(label, "\n".join(buffer))
            buffer = None

        if line.startswith(HEADING_PREFIX):
            try:
                label = validate_label(line[len(HEADING_PREFIX) :].strip())
            except InvalidLabelError as e:
                raise SnapshotFormatError(str(e), lineno, source) from e
            if label in snapshot_file:
                raise SnapshotFormatError(
                    f"duplicate section {label!r}", lineno, source
                )
            open_marker = lineno
        elif line.rstrip() == SEPARATOR and label is not None:
            open_marker = lineno
        else:
            raise SnapshotFormatError(f"unexpected line {line!r}", lineno, source)

    if open_marker:
        raise SnapshotFormatError("expected a record", open_marker, source)
    if buffer is not None:
        assert label is not None
        snapshot_file.append(label, "\n".join(buffer))
    return snapshot_file
