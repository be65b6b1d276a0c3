"""File analysis: why does this file look the way it does?"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..config import AnalysisConfig
from ..insights import Insight, Recommendation, detect_code_smells, file_recommendations
from ..logging_config import get_logger
from ..narrative import Narrative, NarrativeProvider, explain_file
from ..scoring import Velocity, change_velocity
from ..temporal.aggregation import ChurnTotals, churn_totals
from ..temporal.clock import Clock, system_clock
from ..temporal.models import CommitInfo, CommitRecord, RelatedFile
from ._common import AnalysisContext

logger = get_logger(__name__)

REPORTED_HISTORY = 10
REPORTED_URGENT = 5


@dataclass(frozen=True)
class FileMetadata:
    created: Optional[CommitInfo]
    last_modified: Optional[CommitInfo]
    total_commits: int
    unique_authors: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created.to_dict() if self.created else None,
            "last_modified": self.last_modified.to_dict() if self.last_modified else None,
            "total_commits": self.total_commits,
            "unique_authors": self.unique_authors,
        }


@dataclass(frozen=True)
class FileAnalysis:
    file: str
    metadata: FileMetadata
    churn: ChurnTotals
    velocity: Velocity
    history: list[CommitRecord]
    related_files: list[RelatedFile]
    urgent_commits: list[CommitRecord]
    narrative: Narrative
    code_smells: list[Insight] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)

    type = "file"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "file": self.file,
            "metadata": self.metadata.to_dict(),
            "stats": {
                "total_added": self.churn.total_added,
                "total_removed": self.churn.total_removed,
                "avg_change_size": self.churn.avg_change_size,
                "change_velocity": self.velocity.band,
                "velocity_value": round(self.velocity.commits_per_month, 2),
            },
            "history": [c.to_dict() for c in self.history],
            "related_files": [r.to_dict() for r in self.related_files],
            "urgent_commits": [c.to_dict() for c in self.urgent_commits],
            "narrative": self.narrative.to_dict(),
            "code_smells": [s.to_dict() for s in self.code_smells],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


async def analyze_file(
    path: Union[str, Path],
    repo_path: Union[str, Path] = ".",
    config: Optional[AnalysisConfig] = None,
    clock: Clock = system_clock,
    narrator: Optional[NarrativeProvider] = None,
    depth: Optional[int] = None,
) -> FileAnalysis:
    """Analyze one tracked file.

    Raises:
        NotFound: the file does not exist on disk
        SourceUnavailable: the repository cannot be opened or the file is untracked
        QueryFailed: the file's history could not be read
    """
    ctx = AnalysisContext.create(repo_path, config=config, clock=clock, narrator=narrator)
    cfg = ctx.config
    _, rel = ctx.resolve_file(path)

    await ctx.source.require_tracked(rel)
    logger.debug("Analyzing file %s in %s", rel, ctx.repo_path)

    history, timeline = await asyncio.gather(
        ctx.builder.get_file_history(rel, depth=depth or cfg.history_depth, include_stats=True),
        ctx.builder.get_file_timeline(
            rel,
            keywords=cfg.search_keywords,
            related_limit=cfg.related_limit,
            related_depth=cfg.related_depth,
            search_depth=cfg.search_depth,
        ),
    )

    velocity = change_velocity(history, cfg.thresholds)
    smells = detect_code_smells(timeline.keyword_commits)
    narrative = await explain_file(
        ctx.narrator, rel, history, timeline.created, timeline.last_modified
    )

    return FileAnalysis(
        file=rel,
        metadata=FileMetadata(
            created=timeline.created,
            last_modified=timeline.last_modified,
            total_commits=len(history),
            unique_authors=len({c.author for c in history}),
        ),
        churn=churn_totals(history),
        velocity=velocity,
        history=history[:REPORTED_HISTORY],
        related_files=timeline.related_files,
        urgent_commits=timeline.keyword_commits[:REPORTED_URGENT],
        narrative=narrative,
        code_smells=smells,
        recommendations=file_recommendations(
            velocity, smells, timeline.created, timeline.last_modified, cfg.thresholds
        ),
    )
