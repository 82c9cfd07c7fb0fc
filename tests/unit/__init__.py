"""Unit tests.

Purpose
- Verify a single module/class/function in isolation.

Guidelines
- No real filesystem; the in-memory snapshot store stands in for disk.
- Prefer behaviour-centric assertions over implementation details.
"""
