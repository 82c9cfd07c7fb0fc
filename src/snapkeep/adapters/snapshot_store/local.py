"""Local filesystem snapshot store.

Files live under a root directory::

    <root>/<unit>.md              stored snapshots
    <root>/<unit>.new.md          candidates awaiting review
    <root>/<variant>/<unit>.md    snapshots of a variant

Writes go through a temporary file in the target directory followed by an
atomic `os.replace`, so readers never see a half-written snapshot file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from snapkeep.domain.errors import SnapshotIOError
from snapkeep.domain.models import SnapshotFile, validate_unit, validate_variant
from snapkeep.interfaces.snapshot_store import SnapshotStore

from . import codec

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]

SNAPSHOT_SUFFIX = ".md"
CANDIDATE_SUFFIX = ".new.md"
ENCODING = "utf-8"


class LocalSnapshotStore(SnapshotStore):
    """SnapshotStore implementation that uses markdown files on disk."""

    def __init__(self, root: PathLike) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """Return the root directory of the store."""
        return self._root

    # --- Stored snapshots ---

    def load(self, unit: str, variant: str | None = None) -> SnapshotFile:
        return self._read(self.path_for(unit, variant))

    def save(
        self, unit: str, snapshot_file: SnapshotFile, variant: str | None = None
    ) -> None:
        self._write(self.path_for(unit, variant), snapshot_file)

    def delete(self, unit: str, variant: str | None = None) -> bool:
        removed = False
        for path in (
            self.path_for(unit, variant),
            self.candidate_path_for(unit, variant),
        ):
            removed = self._unlink(path) or removed
        return removed

    def units(self, variant: str | None = None) -> list[str]:
        return sorted(
            path.name[: -len(SNAPSHOT_SUFFIX)]
            for path in self._list(variant)
            if not path.name.endswith(CANDIDATE_SUFFIX)
        )

    # --- Candidate snapshots ---

    def load_candidates(self, unit: str, variant: str | None = None) -> SnapshotFile:
        return self._read(self.candidate_path_for(unit, variant))

    def save_candidates(
        self, unit: str, snapshot_file: SnapshotFile, variant: str | None = None
    ) -> None:
        self._write(self.candidate_path_for(unit, variant), snapshot_file)

    def candidate_units(self, variant: str | None = None) -> list[str]:
        return sorted(
            path.name[: -len(CANDIDATE_SUFFIX)]
            for path in self._list(variant)
            if path.name.endswith(CANDIDATE_SUFFIX)
        )

    # --- Paths ---

    def path_for(self, unit: str, variant: str | None = None) -> Path:
        """Return the path of the stored snapshot file of `unit`."""
        return self._directory(variant) / f"{validate_unit(unit)}{SNAPSHOT_SUFFIX}"

    def candidate_path_for(self, unit: str, variant: str | None = None) -> Path:
        """Return the path of the candidate file of `unit`."""
        return self._directory(variant) / f"{validate_unit(unit)}{CANDIDATE_SUFFIX}"

    # --- Internal Helpers ---

    def _directory(self, variant: str | None) -> Path:
        variant = validate_variant(variant)
        return self._root / variant if variant else self._root

    def _list(self, variant: str | None) -> list[Path]:
        directory = self._directory(variant)
        try:
            return [
                path
                for path in directory.iterdir()
                if path.is_file() and path.suffix == SNAPSHOT_SUFFIX
            ]
        except FileNotFoundError:
            return []
        except OSError as e:
            raise SnapshotIOError(directory, "list") from e

    @staticmethod
    def _read(path: Path) -> SnapshotFile:
        try:
            with path.open(encoding=ENCODING, newline="") as fh:
                content = fh.read()
        except FileNotFoundError:
            return SnapshotFile()
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotIOError(path, "read") from e
        return codec.loads(content, source=str(path))

    @staticmethod
    def _write(path: Path, snapshot_file: SnapshotFile) -> None:
        if not snapshot_file:
            LocalSnapshotStore._unlink(path)
            return

        content = codec.dumps(snapshot_file)
        tmp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=ENCODING,
                newline="",
                dir=path.parent,
                prefix=f".{path.name}.",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(content)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise SnapshotIOError(path, "write") from e
        logger.debug("Wrote %d snapshot(s) to %s", len(snapshot_file), path)

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SnapshotIOError(path, "remove") from e
        logger.debug("Removed %s", path)
        return True
