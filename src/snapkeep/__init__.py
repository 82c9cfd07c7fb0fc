"""SNAPKEEP

Human-readable snapshot testing. Expected outputs are recorded as plain
text grouped by test label, compared against freshly rendered output, and
only ever replaced through an explicit review/accept step.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
