"""SNAPKEEP CLI entry point.

Defines the top-level ``snapkeep`` command (via Click-Extra), configures
logging and the snapshot store, and registers the review commands.

Examples
    $ snapkeep --version
    $ snapkeep status
    $ snapkeep review test_parser
    $ snapkeep accept test_parser --label "parses nested lists"
"""

import logging
from pathlib import Path

import click
import click_extra as clickx
from platformdirs import user_log_dir

from snapkeep import __version__, config
from snapkeep.bootstrap import bootstrap
from snapkeep.interfaces.execution_mode import ExecutionMode
from snapkeep.logging import configure_logging, effective_level, log_startup

from .helpers.log_level_parser import parse_log_level
from .snapshots import accept, prune, reject, review, status

logger = logging.getLogger(__name__)


HELP = """SNAPKEEP command-line interface.

    Review and settle snapshot changes recorded by test runs. A run that
    produces changed snapshots leaves them next to the stored ones; use
    `review` to see the diffs, then `accept` or `reject` them.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help=(
        "Increase the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help=(
        "Decrease the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (enables extra developer diagnostics beyond -vv).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to log file written by the flight recorder.",
    default=Path(user_log_dir("snapkeep", appauthor=False)) / "latest.log",
    envvar="SNAPKEEP_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep recent DEBUG log records in memory and write them to --log-path "
        "when a WARNING/ERROR occurs. Console verbosity is unchanged."
    ),
    default=True,
    envvar="SNAPKEEP_FLIGHT_RECORDER",
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush",
    is_flag=True,
    help="Also write the buffered records to --log-path when the command ends.",
    default=False,
    envvar="SNAPKEEP_FORCE_FLUSH_FLIGHT_RECORDER",
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set MINIMUM LEVEL for specific LOGGERS (NAME=LEVEL). Repeatable "
        "(e.g. -L snapkeep.adapters=DEBUG) or via SNAPKEEP_LOGGER_LEVELS "
        "(comma/space list)."
    ),
    default=("click_extra=WARNING",),
    envvar="SNAPKEEP_LOGGER_LEVELS",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--snapshot-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Root directory of the snapshot files.",
    default=config.DEFAULT_SNAPSHOT_DIR,
    envvar=config.SNAPSHOT_DIR_ENVVAR,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--variant",
    help="Snapshot variant (e.g. an OS or dependency version) to operate on.",
    default=None,
    envvar=config.VARIANT_ENVVAR,
    show_envvar=True,
)
@clickx.pass_context
def snapkeep(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder: bool,
    force_flush: bool,
    logger_levels: dict[str, int],
    snapshot_dir: Path,
    variant: str | None,
) -> None:
    """SNAPKEEP command-line interface."""
    level = effective_level(verbose_count, quiet_count)
    handlers = configure_logging(
        level=level,
        debug_mode=debug,
        color=ctx.color is not False,
        log_path=log_path if flight_recorder else None,
        flush_on_close=force_flush,
        logger_levels=logger_levels,
    )
    ctx.call_on_close(logging.shutdown)

    # review commands never compare, so the mode is fixed
    settings = config.Settings(
        snapshot_dir=snapshot_dir, mode=ExecutionMode.BATCH, variant=variant
    )
    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        settings=settings,
        log_path=log_path if flight_recorder else None,
        force_flush=force_flush,
        logger_levels=logger_levels,
    )

    try:
        ctx.obj = bootstrap(settings)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--variant") from e


for command in (status, review, accept, reject, prune):
    snapkeep.add_command(command)
