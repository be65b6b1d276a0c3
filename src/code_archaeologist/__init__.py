"""
Code Archaeologist - explain code through its version-control history

Mines git log, diff and blame output to explain why a file, function or
repository looks the way it does, and flags dead code, hotspots and
process risk with transparent threshold rules.
"""

__version__ = "0.1.0"

from .analyzers import (
    DeadCodeScan,
    FileAnalysis,
    FunctionAnalysis,
    RepositoryAnalysis,
    analyze_file,
    analyze_function,
    analyze_repository,
    detect_dead_code,
)
from .config import AnalysisConfig, ThresholdConfig, load_config
from .exceptions import ArchaeologyError, NotFound, QueryFailed, SourceUnavailable

__all__ = [
    "analyze_file",
    "analyze_function",
    "analyze_repository",
    "detect_dead_code",
    "FileAnalysis",
    "FunctionAnalysis",
    "DeadCodeScan",
    "RepositoryAnalysis",
    "AnalysisConfig",
    "ThresholdConfig",
    "load_config",
    "ArchaeologyError",
    "SourceUnavailable",
    "QueryFailed",
    "NotFound",
]
