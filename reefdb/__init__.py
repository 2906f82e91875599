"""Storage engines, transaction state, savepoints and a write-ahead log for a small database."""

__version__ = "0.1.0"