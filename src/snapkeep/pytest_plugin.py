"""pytest integration: the ``snapshot`` fixture.

Enable it from a top-level ``conftest.py``::

    pytest_plugins = ["snapkeep.pytest_plugin"]

Each test module is one unit, stored as ``_snaps/<module>.md`` beside the
module. With ``--snapshot-dir`` every unit shares one directory and is named
after the module path relative to the rootdir (``pkg/test_util.py`` becomes
``pkg.test_util``). The label of a snapshot is the test's node id within its
module (``test_parse``, ``TestParser::test_parse``, ``test_parse[utf8]``);
repeated snapshots in one test take consecutive positions.

- A new snapshot emits `NewSnapshotWarning` and is written at session end.
- A changed snapshot fails the test with `SnapshotMismatchError`; the fresh
  text is kept for ``snapkeep review``/``snapkeep accept``.
- When every test of a module ran, labels without a test are pruned.
- When a test passes, stored positions beyond its last snapshot are dropped.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from snapkeep import config as snapkeep_config
from snapkeep.bootstrap import build_comparator, build_store, build_synchronizer
from snapkeep.domain.outcomes import Mismatch, New, Outcome
from snapkeep.interfaces.execution_mode import ExecutionMode
from snapkeep.interfaces.snapshot_store import SnapshotStore
from snapkeep.interfaces.transform import Transform
from snapkeep.service_layer.comparator import RunReport, SnapshotComparator

logger = logging.getLogger(__name__)

SNAPS_DIRNAME = "_snaps"


class NewSnapshotWarning(UserWarning):
    """Issued when a snapshot is recorded for the first time."""


class SnapshotMismatchError(AssertionError):
    """A snapshot differs from the stored one."""

    def __init__(self, unit: str, outcome: Mismatch) -> None:
        super().__init__(
            f"Snapshot {outcome.label}[{outcome.position}] changed.\n"
            f"{outcome.diff()}\n"
            f"Run `snapkeep review {unit}` to inspect and "
            f"`snapkeep accept {unit}` to keep the new output."
        )
        self.unit = unit
        self.outcome = outcome


class Snapshot:
    """Snapshot assertions bound to one test."""

    def __init__(self, comparator: SnapshotComparator, label: str) -> None:
        self._comparator = comparator
        self.label = label

    def assert_match(self, text: str, *, transform: Transform | None = None) -> Outcome:
        """Compare `text` with the next snapshot of this test.

        Raises:
            SnapshotMismatchError: If the stored snapshot differs.
        """
        return self._settle(
            self._comparator.compare(self.label, text, transform=transform)
        )

    __call__ = assert_match

    def assert_call(
        self,
        fn: Callable[[], Any],
        *,
        render: Callable[[Any], str] = str,
        error: bool = False,
        transform: Transform | None = None,
    ) -> Outcome:
        """Run `fn` and compare its rendered result (or error) with the snapshot.

        Raises:
            SnapshotMismatchError: If the stored snapshot differs.
            UnexpectedError: If `fn` raises while `error` is False.
            MissingExpectedError: If `fn` returns while `error` is True.
        """
        return self._settle(
            self._comparator.compare_call(
                self.label, fn, render=render, error=error, transform=transform
            )
        )

    def _settle(self, outcome: Outcome) -> Outcome:
        match outcome:
            case New(label=label, position=position, text=text):
                warnings.warn(
                    NewSnapshotWarning(
                        f"Adding new snapshot {label}[{position}]:\n{text}"
                    ),
                    stacklevel=3,
                )
            case Mismatch():
                raise SnapshotMismatchError(self._comparator.unit, outcome)
        return outcome


def label_for(item: pytest.Item) -> str:
    """Return the node id of `item` within its module, e.g. ``TestA::test_it``."""
    return item.nodeid.split("::", 1)[-1]


class SnapshotSession:
    """Per-session bookkeeping: comparators, collected labels and reports."""

    def __init__(self, pytest_config: pytest.Config) -> None:
        settings = snapkeep_config.load_settings()
        option_dir = pytest_config.getoption("snapshot_dir")
        self._root: Path | None = Path(option_dir) if option_dir else None
        self._rootpath = pytest_config.rootpath
        self.mode = settings.mode
        self.variant = pytest_config.getoption("snapshot_variant") or settings.variant
        self._stores: dict[Path, SnapshotStore] = {}
        self._comparators: dict[Path, SnapshotComparator] = {}
        self.collected: dict[Path, list[str]] = {}
        self.partial: set[Path] = set()
        self.passed: set[str] = set()
        self.incomplete: set[str] = set()
        self._nodes: dict[str, tuple[Path, str]] = {}
        self.reports: list[RunReport] = []

    def root_for(self, module_path: Path) -> Path:
        """Return the snapshot directory of `module_path`."""
        return self._root or module_path.parent / SNAPS_DIRNAME

    def store_for(self, module_path: Path) -> SnapshotStore:
        """Return the store holding the snapshots of `module_path`."""
        root = self.root_for(module_path)
        if root not in self._stores:
            self._stores[root] = build_store(root)
        return self._stores[root]

    def unit_for(self, module_path: Path) -> str:
        """Return the unit (snapshot file name) of `module_path`."""
        if self._root is None:
            return module_path.stem
        try:
            relative = module_path.relative_to(self._rootpath)
        except ValueError:
            relative = Path(module_path.name)
        return ".".join(relative.with_suffix("").parts)

    def comparator(self, module_path: Path) -> SnapshotComparator:
        """Return the comparator of the module, creating it on first use."""
        if module_path not in self._comparators:
            self._comparators[module_path] = build_comparator(
                self.store_for(module_path),
                self.unit_for(module_path),
                mode=self.mode,
                variant=self.variant,
            )
        return self._comparators[module_path]

    def collect(self, items: list[pytest.Item]) -> None:
        """Record the labels of `items` and reject modules sharing a unit.

        Raises:
            pytest.UsageError: If two modules would write the same snapshot file.
        """
        for item in items:
            label = label_for(item)
            self._nodes[item.nodeid] = (item.path, label)
            self.collected.setdefault(item.path, []).append(label)

        owners: dict[tuple[Path, str], Path] = {}
        for module_path in self.collected:
            key = (self.root_for(module_path), self.unit_for(module_path))
            owner = owners.setdefault(key, module_path)
            if owner != module_path:
                raise pytest.UsageError(
                    f"{owner} and {module_path} would share the snapshot unit "
                    f"{key[1]!r}; rename one of them."
                )

    def record(self, item: pytest.Item, report: pytest.TestReport) -> None:
        """Track which tests ran to completion."""
        if report.failed or report.skipped:
            self.incomplete.add(item.nodeid)
        elif report.when == "call":
            self.passed.add(item.nodeid)

    def finish(self, *, allow_prune: bool) -> list[RunReport]:
        """Finish every comparator, then tidy the stored snapshots.

        Passing tests always have their trailing positions trimmed; labels
        without a test are pruned only from fully-run modules.
        """
        finished = {
            module_path: comparator.finish()
            for module_path, comparator in self._comparators.items()
        }
        self.reports.extend(finished.values())
        if self.mode is not ExecutionMode.BATCH:
            return self.reports

        completed: dict[Path, list[str]] = {}
        for nodeid in self.passed - self.incomplete:
            if nodeid not in self._nodes:
                continue
            module_path, label = self._nodes[nodeid]
            completed.setdefault(module_path, []).append(label)

        for module_path, labels in self.collected.items():
            store = self.store_for(module_path)
            unit = self.unit_for(module_path)
            if not store.exists(unit, self.variant):
                continue
            synchronizer = build_synchronizer(store, unit, variant=self.variant)
            if allow_prune and module_path not in self.partial:
                synchronizer.prune(labels)
            report = finished.get(module_path)
            observed = report.observed if report else {}
            labels_done = completed.get(module_path, [])
            synchronizer.trim({label: observed.get(label, 0) for label in labels_done})
        return self.reports


session_key = pytest.StashKey[SnapshotSession]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the snapshot command-line options."""
    group = parser.getgroup("snapkeep", "snapshot testing")
    group.addoption(
        "--snapshot-dir",
        dest="snapshot_dir",
        default=None,
        help="Store every module's snapshots under this directory "
        f"instead of {SNAPS_DIRNAME}/ beside the module.",
    )
    group.addoption(
        "--snapshot-variant",
        dest="snapshot_variant",
        default=None,
        help="Snapshot variant to compare against "
        f"(default: ${snapkeep_config.VARIANT_ENVVAR}).",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Create the session bookkeeping object."""
    config.stash[session_key] = SnapshotSession(config)


def pytest_deselected(items: list[pytest.Item]) -> None:
    """Remember modules that will not run completely."""
    for item in items:
        item.config.stash[session_key].partial.add(item.path)


def pytest_collection_finish(session: pytest.Session) -> None:
    """Record the labels of every collected module."""
    session.config.stash[session_key].collect(session.items)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item,
) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    """Note whether each test phase passed."""
    report = yield
    snapshot_session = item.config.stash.get(session_key, None)
    if snapshot_session is not None:
        snapshot_session.record(item, report)
    return report


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    """Flush new snapshots, prune removed tests and trim passing ones."""
    snapshot_session = session.config.stash.get(session_key, None)
    if snapshot_session is None:
        return
    clean_exit = exitstatus in (pytest.ExitCode.OK, pytest.ExitCode.TESTS_FAILED)
    interrupted = bool(session.shouldstop) or not clean_exit
    # node ids (file.py::test) narrow collection without reporting deselection
    narrowed = any("::" in arg for arg in session.config.args)
    snapshot_session.finish(allow_prune=not (interrupted or narrowed))


def pytest_terminal_summary(terminalreporter: Any) -> None:
    """Summarize new and changed snapshots with counts."""
    snapshot_session = terminalreporter.config.stash.get(session_key, None)
    if snapshot_session is None:
        return
    noteworthy = [
        report
        for report in snapshot_session.reports
        if report.new_records or report.mismatches
    ]
    if not noteworthy:
        return
    terminalreporter.section("snapshots")
    for report in noteworthy:
        terminalreporter.write_line(report.summary())


@pytest.fixture
def snapshot(request: pytest.FixtureRequest) -> Snapshot:
    """Snapshot assertions labelled with the current test's node id."""
    snapshot_session = request.config.stash[session_key]
    comparator = snapshot_session.comparator(request.node.path)
    return Snapshot(comparator, label_for(request.node))
