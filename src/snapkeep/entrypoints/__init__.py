"""Entry points for SNAPKEEP (the command-line interface)."""
