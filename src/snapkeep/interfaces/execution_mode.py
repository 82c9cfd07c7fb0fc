"""Execution mode signal consulted by the comparator."""

from enum import Enum


class ExecutionMode(Enum):
    """Whether comparisons run against the store or only preview.

    Modes:
    - INTERACTIVE: a person is poking at code at a prompt; nothing is read
      or written and outcomes are previews.
    - BATCH: a real test run; outcomes are checked against the store.
    """

    INTERACTIVE = "interactive"
    BATCH = "batch"
