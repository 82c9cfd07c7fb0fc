"""Configuration utilities for SNAPKEEP.

This module centralizes the environment variables SNAPKEEP reads and the
small helpers that resolve them:

- ``SNAPKEEP_SNAPSHOT_DIR``: root directory of the snapshot store.
- ``SNAPKEEP_MODE``: ``interactive`` or ``batch``; forces the execution mode.
- ``SNAPKEEP_VARIANT``: optional variant namespace for snapshot files.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from snapkeep.domain.models import validate_variant
from snapkeep.interfaces.execution_mode import ExecutionMode

SNAPSHOT_DIR_ENVVAR = "SNAPKEEP_SNAPSHOT_DIR"
MODE_ENVVAR = "SNAPKEEP_MODE"
VARIANT_ENVVAR = "SNAPKEEP_VARIANT"

DEFAULT_SNAPSHOT_DIR = Path("tests") / "_snaps"


class InvalidExecutionModeError(ValueError):
    """Raised when SNAPKEEP_MODE holds something other than a known mode."""

    def __init__(self, value: str) -> None:
        choices = ", ".join(mode.value for mode in ExecutionMode)
        super().__init__(f"{MODE_ENVVAR}={value!r} is not one of: {choices}.")
        self.value = value


@dataclass(frozen=True)
class Settings:
    """Resolved SNAPKEEP settings.

    Attributes:
        snapshot_dir: Root directory of the snapshot store.
        mode: Execution mode handed to comparators.
        variant: Optional variant namespace.
    """

    snapshot_dir: Path
    mode: ExecutionMode
    variant: str | None = None


def get_snapshot_dir() -> Path:
    """Return the snapshot root from the environment, or the default."""
    if value := os.environ.get(SNAPSHOT_DIR_ENVVAR):
        return Path(value)
    return DEFAULT_SNAPSHOT_DIR


def get_variant() -> str | None:
    """Return the variant from the environment (None when unset or empty).

    Raises:
        InvalidVariantError: If the value is not a safe path component.
    """
    return validate_variant(os.environ.get(VARIANT_ENVVAR) or None)


def is_interactive_session() -> bool:
    """Return True when Python is running an interactive prompt."""
    return bool(hasattr(sys, "ps1") or sys.flags.interactive)


def detect_execution_mode() -> ExecutionMode:
    """Resolve the execution mode.

    ``SNAPKEEP_MODE`` wins when set. Otherwise an interactive prompt means
    `ExecutionMode.INTERACTIVE` and anything else `ExecutionMode.BATCH`.

    Raises:
        InvalidExecutionModeError: If ``SNAPKEEP_MODE`` is set to an unknown value.
    """
    if value := os.environ.get(MODE_ENVVAR, "").strip():
        try:
            return ExecutionMode(value.lower())
        except ValueError as e:
            raise InvalidExecutionModeError(value) from e
    if is_interactive_session():
        return ExecutionMode.INTERACTIVE
    return ExecutionMode.BATCH


def load_settings() -> Settings:
    """Collect all settings from the environment."""
    return Settings(
        snapshot_dir=get_snapshot_dir(),
        mode=detect_execution_mode(),
        variant=get_variant(),
    )
