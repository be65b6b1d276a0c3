"""Exception hierarchy for Code Archaeologist."""

from .base import ArchaeologyError
from .config import ConfigurationError, InvalidConfigError
from .history import HistoryError, NotFound, QueryFailed, SourceUnavailable

__all__ = [
    "ArchaeologyError",
    "HistoryError",
    "SourceUnavailable",
    "QueryFailed",
    "NotFound",
    "ConfigurationError",
    "InvalidConfigError",
]
