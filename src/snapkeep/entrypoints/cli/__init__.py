"""The `snapkeep` command-line interface."""
