"""Dead-code scan: classify source files by time since their last commit."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..config import AnalysisConfig
from ..insights import Insight, dead_code_insights
from ..logging_config import get_logger
from ..scanning import scan_directory
from ..scoring import DEAD, SUSPICIOUS, classify_dead_code
from ..temporal.clock import Clock, system_clock
from ..temporal.models import FileTimePoint
from ._common import AnalysisContext

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeadCodeScan:
    directory: str
    total_files: int
    threshold_days: int
    dead: list[FileTimePoint] = field(default_factory=list)  # oldest first
    suspicious: list[FileTimePoint] = field(default_factory=list)  # oldest first
    active: list[FileTimePoint] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)

    type = "dead_code_scan"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "directory": self.directory,
            "total_files": self.total_files,
            "threshold_days": self.threshold_days,
            "dead_code": [f.to_dict() for f in self.dead],
            "suspicious": [f.to_dict() for f in self.suspicious],
            "active": [f.to_dict() for f in self.active],
            "insights": [i.to_dict() for i in self.insights],
        }


async def detect_dead_code(
    directory: Union[str, Path] = ".",
    recursive: bool = False,
    threshold_days: Optional[int] = None,
    config: Optional[AnalysisConfig] = None,
    clock: Clock = system_clock,
) -> DeadCodeScan:
    """Scan ``directory`` for source files untouched longer than the threshold.

    Files without any commit (untracked or never committed) are skipped.

    Raises:
        SourceUnavailable: ``directory`` is not inside a git repository
    """
    ctx = AnalysisContext.create(directory, config=config, clock=clock)
    thresholds = ctx.config.thresholds
    limit = thresholds.dead_code_days if threshold_days is None else threshold_days

    await ctx.source.ensure_repository()
    files = scan_directory(ctx.repo_path, recursive=recursive)
    logger.debug("Dead-code scan of %d files under %s", len(files), ctx.repo_path)

    last_touches = await asyncio.gather(
        *(ctx.builder.get_last_modification(f) for f in files)
    )

    dead: list[FileTimePoint] = []
    suspicious: list[FileTimePoint] = []
    active: list[FileTimePoint] = []
    for path, info in zip(files, last_touches):
        if info is None:
            continue
        point = FileTimePoint(
            path=path,
            date=info.date,
            days_ago=info.days_ago,
            author=info.author,
            last_commit_message=info.message,
        )
        category = classify_dead_code(point.days_ago, limit, thresholds)
        if category == DEAD:
            dead.append(point)
        elif category == SUSPICIOUS:
            suspicious.append(point)
        else:
            active.append(point)

    dead.sort(key=lambda p: -p.days_ago)
    suspicious.sort(key=lambda p: -p.days_ago)

    return DeadCodeScan(
        directory=str(directory),
        total_files=len(files),
        threshold_days=limit,
        dead=dead,
        suspicious=suspicious,
        active=active,
        insights=dead_code_insights(dead, len(files), limit),
    )
