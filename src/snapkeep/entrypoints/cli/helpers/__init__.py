"""CLI helpers for SNAPKEEP: logger-level parsing and terminal output."""

from .log_level_parser import parse_log_level
from .output import print_review, success, warn

__all__ = ["parse_log_level", "print_review", "success", "warn"]
