"""Domain layer for SNAPKEEP.

Holds the snapshot data model (records, files, comparison outcomes) and the
error taxonomy. Pure Python; no I/O and no imports from other `snapkeep`
layers.
"""
