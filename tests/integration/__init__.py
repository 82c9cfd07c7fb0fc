"""Integration tests.

Purpose
- Exercise the local store on a real filesystem, the bootstrap wiring and the
  pytest plugin inside a `pytester` run.

Guidelines
- Use `tmp_path` for every snapshot directory.
- Minimize mocking; monkeypatch only to force filesystem failures.
"""
