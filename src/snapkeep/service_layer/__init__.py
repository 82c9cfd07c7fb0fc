"""Service layer for SNAPKEEP: the comparator and the file synchronizer."""
