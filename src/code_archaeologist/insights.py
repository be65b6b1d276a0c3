"""Turn computed metrics into ordered, typed insight records.

Emission order is fixed per generator so that rendered output is stable
across runs; the order carries no meaning beyond display.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Literal, Optional, Sequence, Union

from .config import DEFAULT_THRESHOLDS, DEFAULT_URGENT_PATTERN, ThresholdConfig
from .scoring import DECREASING, INCREASING, ComplexityEstimate, HealthMetrics, Velocity
from .temporal.aggregation import top_n
from .temporal.models import CommitInfo, CommitRecord, FileTimePoint

Severity = Literal["info", "medium", "high"]
Priority = Literal["low", "medium", "high"]
Evidence = Union[CommitRecord, FileTimePoint]

PANIC_PATTERN = re.compile(r"fix|bug|hotfix|urgent|patch|critical", re.IGNORECASE)
DEBT_PATTERN = re.compile(r"todo|temp|temporary|hack|workaround", re.IGNORECASE)
SMELL_EVIDENCE_LIMIT = 3


@dataclass(frozen=True)
class Insight:
    type: str
    severity: Severity
    message: str
    evidence: list[Evidence] = field(default_factory=list)
    suggestion: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "severity": self.severity,
            "message": self.message,
        }
        if self.evidence:
            data["evidence"] = [e.to_dict() for e in self.evidence]
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


@dataclass(frozen=True)
class Recommendation:
    type: str
    priority: Priority
    message: str
    details: list[Insight] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "priority": self.priority,
            "message": self.message,
        }
        if self.details:
            data["details"] = [d.to_dict() for d in self.details]
        return data


def repository_insights(
    health: HealthMetrics,
    urgent_commits: Sequence[CommitRecord],
    top_file_count: int,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> list[Insight]:
    """Health statement, then quality, hotspot, trend and process warnings."""
    insights = [
        Insight(
            type="health",
            severity="high" if health.overall_health == "poor" else "info",
            message=(
                f"Repository health: {health.overall_health} "
                f"(score: {health.health_score}/100)"
            ),
        )
    ]

    if health.bug_fix_ratio > thresholds.insight_bug_ratio:
        insights.append(
            Insight(
                type="quality",
                severity="high",
                message=f"High bug fix ratio ({health.bug_fix_ratio}%) - quality issues detected",
            )
        )

    if health.change_concentration > thresholds.insight_concentration:
        insights.append(
            Insight(
                type="hotspot",
                severity="medium",
                message=(
                    f"{health.change_concentration}% of changes in top {top_file_count} "
                    "files - potential hotspots"
                ),
            )
        )

    if health.activity_trend == DECREASING:
        insights.append(
            Insight(
                type="activity",
                severity="medium",
                message="Commit activity is decreasing - project may be in maintenance mode",
            )
        )
    elif health.activity_trend == INCREASING:
        insights.append(
            Insight(
                type="activity",
                severity="info",
                message="Commit activity is increasing - active development detected",
            )
        )

    if len(urgent_commits) > thresholds.insight_urgent_count:
        insights.append(
            Insight(
                type="pattern",
                severity="high",
                message=(
                    f"{len(urgent_commits)} urgent/fix commits found - "
                    "review development process"
                ),
                evidence=list(urgent_commits[:SMELL_EVIDENCE_LIMIT]),
            )
        )

    return insights


def dead_code_insights(
    dead: Sequence[FileTimePoint], total_files: int, threshold_days: int
) -> list[Insight]:
    """Summary, oldest file and dominant extension for a dead-code scan.

    ``dead`` must already be sorted oldest first.
    """
    if not dead:
        return []

    percentage = len(dead) / total_files * 100 if total_files > 0 else 0.0
    oldest = dead[0]
    insights = [
        Insight(
            type="summary",
            severity="medium",
            message=(
                f"Found {len(dead)} files ({percentage:.1f}%) untouched for "
                f"{threshold_days}+ days"
            ),
        ),
        Insight(
            type="oldest",
            severity="info",
            message=f"Oldest untouched file: {oldest.path} ({oldest.days_ago} days)",
            evidence=[oldest],
        ),
    ]

    extensions = Counter(PurePath(f.path).suffix or "(none)" for f in dead)
    ext, count = top_n(extensions, 1)[0]
    insights.append(
        Insight(
            type="pattern",
            severity="info",
            message=f"Most dead code in {ext} files ({count} files)",
        )
    )
    return insights


def detect_code_smells(commits: Sequence[CommitRecord]) -> list[Insight]:
    """Flag rushed-fix and acknowledged-debt commits by message."""
    panic = [c for c in commits if PANIC_PATTERN.search(c.message)]
    debt = [c for c in commits if DEBT_PATTERN.search(c.message)]

    smells = []
    if panic:
        smells.append(
            Insight(
                type="panic_driven",
                severity="high",
                message=f"Found {len(panic)} urgent/hotfix commits",
                evidence=panic[:SMELL_EVIDENCE_LIMIT],
                suggestion="This code may contain rushed fixes that need review",
            )
        )
    if debt:
        smells.append(
            Insight(
                type="technical_debt",
                severity="medium",
                message=f"Found {len(debt)} temporary/hack commits",
                evidence=debt[:SMELL_EVIDENCE_LIMIT],
                suggestion="Contains acknowledged technical debt",
            )
        )
    return smells


def file_recommendations(
    velocity: Velocity,
    code_smells: Sequence[Insight],
    created: Optional[CommitInfo],
    last_modified: Optional[CommitInfo],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> list[Recommendation]:
    recommendations = []
    idle_days = last_modified.days_ago if last_modified else 0
    age_days = created.days_ago if created else 0

    if idle_days > thresholds.stale_days:
        recommendations.append(
            Recommendation(
                type="potential_dead_code",
                priority="medium",
                message=f"No changes in {idle_days} days - consider if this is still needed",
            )
        )

    if velocity.band == "high":
        recommendations.append(
            Recommendation(
                type="high_churn",
                priority="high",
                message=(
                    "High change frequency detected - may indicate instability "
                    "or unclear requirements"
                ),
            )
        )

    if code_smells:
        recommendations.append(
            Recommendation(
                type="technical_debt",
                priority="high",
                message="Technical debt detected - review and refactor recommended",
                details=list(code_smells),
            )
        )

    if (
        thresholds.maintenance_days < idle_days < thresholds.stale_days
        and age_days < thresholds.legacy_days
    ):
        recommendations.append(
            Recommendation(
                type="maintenance_needed",
                priority="low",
                message=(
                    "File is stable but not actively maintained - ensure it still "
                    "meets requirements"
                ),
            )
        )

    return recommendations


def function_recommendations(
    complexity: ComplexityEstimate,
    contributors: int,
    related_commits: Sequence[CommitRecord],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    urgent_pattern: str = DEFAULT_URGENT_PATTERN,
) -> list[Recommendation]:
    recommendations = []

    if complexity.level == "high":
        recommendations.append(
            Recommendation(
                type="refactor",
                priority="high",
                message=(
                    f"High complexity ({complexity.score}) - consider breaking into "
                    "smaller functions"
                ),
            )
        )

    if contributors > thresholds.max_contributors:
        recommendations.append(
            Recommendation(
                type="documentation",
                priority="medium",
                message=f"{contributors} different contributors - ensure documentation is clear",
            )
        )

    if len(related_commits) > thresholds.max_related_commits:
        recommendations.append(
            Recommendation(
                type="stability",
                priority="medium",
                message=(
                    f"{len(related_commits)} commits found - function may have "
                    "unclear requirements"
                ),
            )
        )

    urgent_re = re.compile(urgent_pattern, re.IGNORECASE)
    urgent = [c for c in related_commits if urgent_re.search(c.message)]
    if len(urgent) > thresholds.max_urgent_related:
        recommendations.append(
            Recommendation(
                type="quality",
                priority="high",
                message=f"{len(urgent)} urgent fixes detected - thorough testing recommended",
            )
        )

    return recommendations
