"""Contract tests.

Purpose
- Define SnapshotStore behaviour once and run it against every backend.

Guidelines
- Parametrize backends via fixtures.
- Assert only the public contract, not how a backend lays out its data.
"""
