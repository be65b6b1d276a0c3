"""Top-level analyses: file, function, dead-code scan and repository."""

from .dead_code import DeadCodeScan, detect_dead_code
from .file import FileAnalysis, analyze_file
from .function import FunctionAnalysis, analyze_function, find_function
from .repository import RepositoryAnalysis, analyze_repository

__all__ = [
    "analyze_file",
    "analyze_function",
    "analyze_repository",
    "detect_dead_code",
    "find_function",
    "FileAnalysis",
    "FunctionAnalysis",
    "DeadCodeScan",
    "RepositoryAnalysis",
]
