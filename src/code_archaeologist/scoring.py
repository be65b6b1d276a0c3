"""Threshold and ratio rules over aggregated history.

Every cut-off comes from :class:`~code_archaeologist.config.ThresholdConfig`;
the functions here only apply them. All results are plain values or frozen
dataclasses recomputed per analysis.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Literal, Optional, Sequence, Union

import numpy as np

from .config import DEFAULT_THRESHOLDS, ThresholdConfig
from .temporal.clock import SECONDS_PER_DAY, parse_date
from .temporal.models import CommitRecord

DeadCodeCategory = Literal["dead", "suspicious", "active"]
Band = Literal["low", "medium", "high"]
ActivityTrend = Literal["increasing", "decreasing", "stable"]
OverallHealth = Literal["good", "fair", "poor"]

DEAD = "dead"
SUSPICIOUS = "suspicious"
ACTIVE = "active"

INCREASING = "increasing"
DECREASING = "decreasing"
STABLE = "stable"

# Control-flow constructs counted by the complexity estimate. Each pattern is
# counted independently, so "if (a && b)" scores for both `if` and `&&`.
COMPLEXITY_PATTERNS: dict[str, re.Pattern[str]] = {
    "if": re.compile(r"\bif\b"),
    "for": re.compile(r"\bfor\b"),
    "while": re.compile(r"\bwhile\b"),
    "case": re.compile(r"\bcase\b"),
    "catch": re.compile(r"\bcatch\b"),
    "and": re.compile(r"&&"),
    "or": re.compile(r"\|\|"),
    "ternary": re.compile(r"(?<![?.])\?(?![?.:])[^?:;\n]*:"),
}


# ---------------------------------------------------------------------------
# Dead code
# ---------------------------------------------------------------------------


def classify_dead_code(
    days_since_touch: int,
    threshold_days: Optional[int] = None,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> DeadCodeCategory:
    """dead above the threshold, suspicious above ``threshold * factor``, else active."""
    limit = thresholds.dead_code_days if threshold_days is None else threshold_days
    if days_since_touch > limit:
        return DEAD
    if days_since_touch > limit * thresholds.suspicious_factor:
        return SUSPICIOUS
    return ACTIVE


# ---------------------------------------------------------------------------
# Change velocity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Velocity:
    commits_per_month: float
    band: Band


def months_between(
    oldest: Union[str, datetime], newest: Union[str, datetime], days_per_month: int = 30
) -> float:
    seconds = (parse_date(newest) - parse_date(oldest)).total_seconds()
    return seconds / (SECONDS_PER_DAY * days_per_month)


def velocity_band(commits_per_month: float, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> Band:
    if commits_per_month > thresholds.velocity_high:
        return "high"
    if commits_per_month > thresholds.velocity_medium:
        return "medium"
    return "low"


def change_velocity(
    history: Sequence[CommitRecord], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> Velocity:
    """Commits per month across the sample's date span (0 for a zero span)."""
    if not history:
        return Velocity(0.0, "low")

    dates = sorted(parse_date(c.date) for c in history)
    span = months_between(dates[0], dates[-1], thresholds.days_per_month)
    value = len(history) / span if span > 0 else 0.0
    return Velocity(value, velocity_band(value, thresholds))


# ---------------------------------------------------------------------------
# Complexity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComplexityEstimate:
    """Approximate cyclomatic complexity from keyword counts, not a parse."""

    score: int
    level: Band

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def estimate_complexity(
    code: str, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> ComplexityEstimate:
    score = 1
    for pattern in COMPLEXITY_PATTERNS.values():
        score += len(pattern.findall(code))

    if score > thresholds.complexity_high:
        level: Band = "high"
    elif score > thresholds.complexity_medium:
        level = "medium"
    else:
        level = "low"
    return ComplexityEstimate(score=score, level=level)


# ---------------------------------------------------------------------------
# Stability
# ---------------------------------------------------------------------------


def stability_band(commit_count: int, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> str:
    if commit_count <= 0:
        return "unknown"
    if commit_count < thresholds.stability_few:
        return "never modified"
    if commit_count < thresholds.stability_some:
        return "few changes"
    if commit_count < thresholds.stability_many:
        return "some changes"
    return "many changes"


# ---------------------------------------------------------------------------
# Repository health
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HealthMetrics:
    bug_fix_ratio: float  # percent, one decimal
    change_concentration: float  # percent, one decimal
    activity_trend: ActivityTrend
    health_score: int  # 0..100
    overall_health: OverallHealth

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _percentage(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def bug_fix_ratio(urgent_count: int, total_commits: int) -> float:
    return _percentage(urgent_count, total_commits)


def change_concentration(top_file_counts: Sequence[int], total_commits: int) -> float:
    """Share of commit activity landing in the reported top files."""
    return _percentage(sum(top_file_counts), total_commits)


def activity_trend(
    monthly_counts: Sequence[int], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> ActivityTrend:
    """Compare the mean of the latest window of months to the window before it.

    ``monthly_counts`` must be in ascending month order.
    """
    if len(monthly_counts) < 2:
        return STABLE

    window = thresholds.trend_window_months
    counts = np.asarray(monthly_counts, dtype=float)
    recent = counts[-window:]
    older = counts[-2 * window : -window]

    recent_mean = float(recent.mean())
    older_mean = float(older.mean()) if older.size else recent_mean
    if older_mean == 0:
        return STABLE

    change = (recent_mean - older_mean) / older_mean * 100
    if change > thresholds.trend_change_pct:
        return INCREASING
    if change < -thresholds.trend_change_pct:
        return DECREASING
    return STABLE


def health_score(
    bug_ratio: float,
    concentration: float,
    trend: str,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> int:
    """100 minus the highest bug band penalty, the highest concentration band
    penalty and a declining-activity penalty, clamped to [0, 100]."""
    score = 100

    if bug_ratio > thresholds.bug_ratio_high:
        score -= thresholds.bug_penalty_high
    elif bug_ratio > thresholds.bug_ratio_medium:
        score -= thresholds.bug_penalty_medium
    elif bug_ratio > thresholds.bug_ratio_low:
        score -= thresholds.bug_penalty_low

    if concentration > thresholds.concentration_high:
        score -= thresholds.concentration_penalty_high
    elif concentration > thresholds.concentration_medium:
        score -= thresholds.concentration_penalty_medium

    if trend == DECREASING:
        score -= thresholds.decreasing_trend_penalty

    return max(0, min(100, score))


def overall_health(score: int, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> OverallHealth:
    if score > thresholds.health_good:
        return "good"
    if score > thresholds.health_fair:
        return "fair"
    return "poor"


def compute_health(
    total_commits: int,
    urgent_count: int,
    top_file_counts: Sequence[int],
    monthly_counts: Sequence[int],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> HealthMetrics:
    ratio = bug_fix_ratio(urgent_count, total_commits)
    concentration = change_concentration(top_file_counts, total_commits)
    trend = activity_trend(monthly_counts, thresholds)
    score = health_score(ratio, concentration, trend, thresholds)
    return HealthMetrics(
        bug_fix_ratio=ratio,
        change_concentration=concentration,
        activity_trend=trend,
        health_score=score,
        overall_health=overall_health(score, thresholds),
    )
