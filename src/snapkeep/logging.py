"""Logging helpers used by the SNAPKEEP CLI.

`configure_logging` installs two handlers on the root logger:

- a Rich console handler on stderr whose level follows ``-v``/``-q``, and
- an optional in-memory "flight recorder" that keeps DEBUG records and writes
  them to a file once a WARNING arrives (a changed snapshot, a failed write).

Records from other packages get a ``[package]`` prefix on the console.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from importlib.metadata import version
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

    from snapkeep.config import Settings

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "snapkeep"
BASE_LEVEL = logging.WARNING
FLIGHT_RECORDER_CAPACITY = 2000

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]


class ThirdPartyPrefixFilter(logging.Filter):
    """Set ``record.prefix`` to ``[package]`` for non-SNAPKEEP records.

    Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        package = record.name.partition(".")[0]
        record.prefix = "" if package == PROJECT_PREFIX else f"[{package}]"
        return True


def effective_level(verbose: int = 0, quiet: int = 0) -> int:
    """Return the console level for the given ``-v``/``-q`` counts.

    Each ``-v`` lowers the WARNING default by one level, each ``-q`` raises
    it; the result is clamped to DEBUG..CRITICAL.
    """
    level = BASE_LEVEL - 10 * verbose + 10 * quiet
    return max(logging.DEBUG, min(logging.CRITICAL, level))


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Configure and return a RichHandler writing to stderr.

    Args:
        level: Minimum console level (DEBUG in debug mode).
        debug_mode: Show timestamps, logger names and source paths.
        color: Enable color output (mirrors click-extra's ``--color``).
    """
    color_system: ColorSystem | None = "auto" if color else None
    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=Console(color_system=color_system, stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = FLIGHT_RECORDER_CAPACITY,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Configure and return an in-memory flight recorder backed by a file.

    Up to `capacity` records are buffered and written to `path` when a record
    at `flush_level` or higher arrives (or on close if `flush_on_close`). The
    file is only created once something is flushed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s:%(lineno)d: %(message)s"
        )
    )
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def configure_logging(  # pylint: disable=too-many-arguments
    *,
    level: int,
    debug_mode: bool = False,
    color: bool = True,
    log_path: Path | None = None,
    flush_on_close: bool = False,
    logger_levels: dict[str, int] | None = None,
) -> list[logging.Handler]:
    """Replace the root logger's handlers and apply per-logger levels.

    Args:
        level: Console level, usually from `effective_level`.
        debug_mode: Passed on to `config_console_handler`.
        color: Passed on to `config_console_handler`.
        log_path: Flight recorder file; None disables the recorder.
        flush_on_close: Flush the recorder when logging shuts down.
        logger_levels: Minimum level per logger name (``-L NAME=LEVEL``).

    Returns:
        list[logging.Handler]: The installed handlers, console first.
    """
    handlers: list[logging.Handler] = [
        config_console_handler(level=level, debug_mode=debug_mode, color=color)
    ]
    if log_path is not None:
        handlers.append(
            config_flight_recorder(path=log_path, flush_on_close=flush_on_close)
        )
    # the root stays at DEBUG so the flight recorder sees everything
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, lvl in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(lvl)
    return handlers


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    settings: Settings,
    log_path: Path | None,
    force_flush: bool,
    logger_levels: dict[str, int],
) -> None:
    """Log a one-line startup summary plus DEBUG diagnostics.

    Args:
        logger: Logger used to emit startup messages.
        app_version: Application version string to display.
        level: Effective console level (numeric).
        handlers: Handlers installed by `configure_logging`.
        settings: Store settings the command runs with.
        log_path: Flight recorder file, or None when the recorder is off.
        force_flush: Whether the recorder is flushed when logging shuts down.
        logger_levels: Per-logger level overrides.
    """
    logger.info(
        "SNAPKEEP %s: console=%s, flight-recorder=%s, snapshots=%s%s",
        app_version,
        logging.getLevelName(level),
        "ON" if log_path is not None else "OFF",
        settings.snapshot_dir,
        f" (variant {settings.variant})" if settings.variant else "",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s, CWD: %s", os.getpid(), Path.cwd())
    logger.debug(
        "Libraries: %s",
        ", ".join(f"{lib} {version(lib)}" for lib in ("click", "click-extra", "rich")),
    )
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if log_path is not None:
        logger.debug(
            "Flight recorder: path=%s, flush_on_close=%s", log_path, force_flush
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
