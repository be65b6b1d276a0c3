"""Candidate source file discovery for dead-code scans."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

from .logging_config import get_logger

logger = get_logger(__name__)

CODE_EXTENSIONS = frozenset(
    {
        ".js", ".jsx", ".ts", ".tsx",
        ".py", ".java", ".cpp", ".c", ".h",
        ".cs", ".go", ".rb", ".php", ".swift",
    }
)

SKIP_DIRS = frozenset(
    {"node_modules", ".git", "dist", "build", "coverage", ".next", "__pycache__", "vendor"}
)


def scan_directory(
    root: Union[str, Path],
    recursive: bool = False,
    extensions: Iterable[str] = CODE_EXTENSIONS,
) -> list[str]:
    """Source files under ``root`` as sorted POSIX paths relative to ``root``.

    Without ``recursive`` only files directly in ``root`` are returned.
    Directories named in SKIP_DIRS and unreadable directories are skipped.
    """
    root_path = Path(root)
    wanted = frozenset(extensions)
    found: list[str] = []

    def _walk(directory: Path) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return

        for entry in entries:
            if entry.name in SKIP_DIRS:
                continue
            if entry.is_dir():
                if recursive and not entry.is_symlink():
                    _walk(entry)
            elif entry.is_file() and entry.suffix in wanted:
                found.append(entry.relative_to(root_path).as_posix())

    _walk(root_path)
    return sorted(found)
