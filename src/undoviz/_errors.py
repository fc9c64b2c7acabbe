"""Undoviz error hierarchy.

All undoviz-specific errors inherit from UndovizError for easy catching.
"""


class UndovizError(Exception):
    """Base error for all undoviz operations."""


class ConfigError(UndovizError):
    """Invalid or unreadable configuration."""


class HistoryError(UndovizError):
    """Host history data could not be interpreted (parsing, jump targets)."""


class SnapshotError(UndovizError):
    """The host cannot supply the buffer lines for a historical state."""


class DiffError(UndovizError):
    """Invalid arguments to the diff engine."""
