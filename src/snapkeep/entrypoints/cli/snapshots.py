"""Snapshot review commands.

- ``status``: list units with snapshots awaiting review.
- ``review UNIT``: print the diff of every changed snapshot.
- ``accept UNIT``: overwrite stored snapshots with the fresh ones.
- ``reject UNIT``: discard the fresh snapshots.
- ``prune UNIT --keep LABEL``: drop labels whose tests no longer exist.

Human-oriented notices go to **stderr**; diffs and listings go to stdout.
Mutating commands ask for confirmation unless ``--yes`` is given.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import click
from rich.console import Console

from snapkeep.bootstrap import AppContainer
from snapkeep.domain.errors import SnapshotError, SnapshotStoreError

from .helpers import print_review, success, warn

logger = logging.getLogger(__name__)

NOTHING_TO_REVIEW_MSG = "No snapshots are awaiting review."


@contextmanager
def _snapshot_errors() -> Iterator[None]:
    """Turn SNAPKEEP errors into ClickExceptions with readable messages."""
    try:
        yield
    except SnapshotStoreError as e:
        logger.debug("Snapshot store failure", exc_info=True)
        raise click.ClickException(f"Snapshot store error: {e}") from e
    except (SnapshotError, ValueError) as e:
        raise click.ClickException(str(e)) from e


def _labels_or_pending(
    app: AppContainer, unit: str, labels: tuple[str, ...]
) -> list[str]:
    return list(labels) or app.synchronizer(unit).pending_labels()


label_option = click.option(
    "--label",
    "-l",
    "labels",
    multiple=True,
    help="Only act on this label (repeatable). Defaults to every changed label.",
)
yes_option = click.option(
    "--yes", "-y", is_flag=True, help="Do not ask for confirmation."
)


@click.command()
@click.pass_obj
def status(app: AppContainer) -> None:
    """List units with snapshots awaiting review."""
    with _snapshot_errors():
        units = app.store.candidate_units(app.settings.variant)
        pending = {unit: app.synchronizer(unit).pending_labels() for unit in units}

    pending = {unit: labels for unit, labels in pending.items() if labels}
    if not pending:
        success(NOTHING_TO_REVIEW_MSG)
        return
    for unit, labels in pending.items():
        click.echo(unit)
        for label in labels:
            click.echo(f"  {label}")
    changed = sum(map(len, pending.values()))
    warn(f"{changed} label(s) in {len(pending)} unit(s) changed.")


@click.command()
@click.argument("unit")
@label_option
@click.pass_obj
def review(app: AppContainer, unit: str, labels: tuple[str, ...]) -> None:
    """Show the diffs of the changed snapshots of UNIT."""
    console = Console(highlight=False)
    shown = 0
    with _snapshot_errors():
        synchronizer = app.synchronizer(unit)
        for label in _labels_or_pending(app, unit, labels):
            items = synchronizer.review(label)
            print_review(console, unit, items)
            shown += len(items)
    if not shown:
        success(NOTHING_TO_REVIEW_MSG)


@click.command()
@click.argument("unit")
@label_option
@yes_option
@click.pass_obj
def accept(app: AppContainer, unit: str, labels: tuple[str, ...], yes: bool) -> None:
    """Overwrite the stored snapshots of UNIT with the fresh ones."""
    with _snapshot_errors():
        targets = _labels_or_pending(app, unit, labels)
        if not targets:
            success(NOTHING_TO_REVIEW_MSG)
            return
        if not yes:
            warn(f"This will overwrite stored snapshots for: {', '.join(targets)}")
            click.confirm("Accept the new snapshots?", abort=True)
        synchronizer = app.synchronizer(unit)
        accepted = sum(synchronizer.accept(label) for label in targets)
    success(f"Accepted {accepted} snapshot(s) in {unit}.")


@click.command()
@click.argument("unit")
@label_option
@yes_option
@click.pass_obj
def reject(app: AppContainer, unit: str, labels: tuple[str, ...], yes: bool) -> None:
    """Discard the fresh snapshots of UNIT and keep the stored ones."""
    with _snapshot_errors():
        targets = _labels_or_pending(app, unit, labels)
        if not targets:
            success(NOTHING_TO_REVIEW_MSG)
            return
        if not yes:
            click.confirm(
                f"Discard the new snapshots for {', '.join(targets)}?", abort=True
            )
        synchronizer = app.synchronizer(unit)
        rejected = sum(synchronizer.reject(label) for label in targets)
    success(f"Rejected {rejected} snapshot(s) in {unit}.")


@click.command()
@click.argument("unit")
@click.option(
    "--keep",
    "-k",
    "keep",
    multiple=True,
    help="Label that still has a test (repeatable). Every other label is removed.",
)
@yes_option
@click.pass_obj
def prune(app: AppContainer, unit: str, keep: tuple[str, ...], yes: bool) -> None:
    """Remove the snapshots of UNIT whose labels are not kept."""
    with _snapshot_errors():
        stored = app.store.load(unit, app.settings.variant).labels()
        doomed = [label for label in stored if label not in set(keep)]
        if not doomed:
            success(f"Nothing to prune in {unit}.")
            return
        if not yes:
            warn(f"This will delete the snapshots for: {', '.join(doomed)}")
            click.confirm("Prune these labels?", abort=True)
        removed = app.synchronizer(unit).prune(keep)
    for label in removed:
        click.echo(label)
    success(f"Pruned {len(removed)} label(s) from {unit}.")
