"""Temporal analysis: git queries, parsing, per-file history and aggregation."""

from .aggregation import (
    ChurnTotals,
    RepositoryAggregate,
    aggregate_commits,
    build_aggregate,
    churn_totals,
    timeline,
    top_n,
)
from .clock import Clock, days_ago, fixed_clock, parse_date, system_clock
from .git_source import GitSource
from .history import EntityHistoryBuilder, filter_by_keywords
from .models import (
    BlameEntry,
    ChangeStat,
    CommitInfo,
    CommitRecord,
    FileTimeline,
    FileTimePoint,
    RelatedFile,
)
from .parsers import parse_blame, parse_diff, parse_log

__all__ = [
    "GitSource",
    "EntityHistoryBuilder",
    "RepositoryAggregate",
    "ChurnTotals",
    "CommitRecord",
    "ChangeStat",
    "BlameEntry",
    "CommitInfo",
    "FileTimePoint",
    "FileTimeline",
    "RelatedFile",
    "Clock",
    "aggregate_commits",
    "build_aggregate",
    "churn_totals",
    "days_ago",
    "filter_by_keywords",
    "fixed_clock",
    "parse_blame",
    "parse_date",
    "parse_diff",
    "parse_log",
    "system_clock",
    "timeline",
    "top_n",
]
