"""Repository analysis: contributors, hotspots, activity and health."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..config import AnalysisConfig
from ..insights import Insight, repository_insights
from ..logging_config import get_logger
from ..scoring import HealthMetrics, compute_health
from ..temporal.aggregation import aggregate_commits, timeline, top_n
from ..temporal.clock import Clock, system_clock
from ..temporal.models import CommitRecord
from ._common import AnalysisContext

logger = get_logger(__name__)


@dataclass(frozen=True)
class RepositoryAnalysis:
    total_commits: int
    unique_authors: int
    date_range: tuple[Optional[str], Optional[str]]  # (oldest, newest)
    top_files: list[tuple[str, int]]
    top_contributors: list[tuple[str, int]]
    urgent_commits: list[CommitRecord]
    timeline: list[tuple[str, int]]  # ascending months
    health: HealthMetrics
    insights: list[Insight] = field(default_factory=list)

    type = "repository"

    def to_dict(self) -> dict[str, Any]:
        oldest, newest = self.date_range
        return {
            "type": self.type,
            "summary": {
                "total_commits": self.total_commits,
                "unique_authors": self.unique_authors,
                "date_range": {"from": oldest, "to": newest},
            },
            "top_files": [{"file": f, "commits": n} for f, n in self.top_files],
            "top_contributors": [{"author": a, "commits": n} for a, n in self.top_contributors],
            "urgent_commits": [c.to_dict() for c in self.urgent_commits],
            "timeline": [{"month": m, "commits": n} for m, n in self.timeline],
            "health_metrics": self.health.to_dict(),
            "insights": [i.to_dict() for i in self.insights],
        }


async def analyze_repository(
    repo_path: Union[str, Path] = ".",
    since: Optional[str] = None,
    top: Optional[int] = None,
    config: Optional[AnalysisConfig] = None,
    clock: Clock = system_clock,
) -> RepositoryAnalysis:
    """Aggregate the whole history (optionally since a date) into a health report.

    Raises:
        SourceUnavailable: the repository cannot be opened
        QueryFailed: the repository log could not be read
    """
    ctx = AnalysisContext.create(repo_path, config=config, clock=clock)
    cfg = ctx.config
    limit = top or cfg.top_n

    await ctx.source.ensure_repository()
    aggregate = await aggregate_commits(ctx.source, since=since, urgent_pattern=cfg.urgent_pattern)

    top_files = top_n(aggregate.by_file, limit)
    months = timeline(aggregate.by_month)
    health = compute_health(
        total_commits=aggregate.total_commits,
        urgent_count=len(aggregate.urgent_commits),
        top_file_counts=[n for _, n in top_files],
        monthly_counts=[n for _, n in months],
        thresholds=cfg.thresholds,
    )
    logger.debug("Repository health %s (%d)", health.overall_health, health.health_score)

    return RepositoryAnalysis(
        total_commits=aggregate.total_commits,
        unique_authors=len(aggregate.by_author),
        date_range=aggregate.date_range,
        top_files=top_files,
        top_contributors=top_n(aggregate.by_author, limit),
        urgent_commits=aggregate.urgent_commits[: cfg.max_urgent_commits],
        timeline=months[-cfg.timeline_months :],
        health=health,
        insights=repository_insights(
            health, aggregate.urgent_commits, len(top_files), cfg.thresholds
        ),
    )
