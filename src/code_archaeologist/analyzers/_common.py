"""Shared wiring for the analyses: config, clock, git source, path resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import AnalysisConfig
from ..exceptions import NotFound
from ..narrative import NarrativeProvider
from ..temporal.clock import Clock, system_clock
from ..temporal.git_source import GitSource
from ..temporal.history import EntityHistoryBuilder


@dataclass
class AnalysisContext:
    """Everything one top-level analysis needs; built fresh per call."""

    repo_path: Path
    config: AnalysisConfig
    clock: Clock
    source: GitSource
    builder: EntityHistoryBuilder
    narrator: Optional[NarrativeProvider] = None

    @classmethod
    def create(
        cls,
        repo_path: Union[str, Path] = ".",
        config: Optional[AnalysisConfig] = None,
        clock: Clock = system_clock,
        narrator: Optional[NarrativeProvider] = None,
    ) -> AnalysisContext:
        config = config or AnalysisConfig()
        root = Path(repo_path).resolve()
        source = GitSource(
            root,
            git_binary=config.git_binary,
            timeout=config.git_timeout_seconds,
            max_concurrent=config.max_concurrent_git,
        )
        return cls(
            repo_path=root,
            config=config,
            clock=clock,
            source=source,
            builder=EntityHistoryBuilder(source, clock=clock),
            narrator=narrator,
        )

    def resolve_file(self, path: Union[str, Path]) -> tuple[Path, str]:
        """Absolute path on disk and the repository-relative POSIX pathspec.

        Relative paths are taken relative to the repository path.

        Raises:
            NotFound: the file does not exist on disk
        """
        candidate = Path(path)
        absolute = candidate if candidate.is_absolute() else self.repo_path / candidate
        absolute = absolute.resolve()
        if not absolute.is_file():
            raise NotFound("file", str(path))
        relative = Path(os.path.relpath(absolute, self.repo_path)).as_posix()
        return absolute, relative
