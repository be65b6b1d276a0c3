"""Fold a commit stream into grouped counts and running totals."""

from __future__ import annotations

import asyncio
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ..config import DEFAULT_URGENT_PATTERN
from ..exceptions import QueryFailed
from ..logging_config import get_logger
from .git_source import GitSource
from .models import CommitRecord

logger = get_logger(__name__)


@dataclass
class RepositoryAggregate:
    commits: list[CommitRecord]  # newest first
    by_author: Counter[str] = field(default_factory=Counter)
    by_file: Counter[str] = field(default_factory=Counter)
    by_month: Counter[str] = field(default_factory=Counter)  # "YYYY-MM"
    urgent_commits: list[CommitRecord] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return len(self.commits)

    @property
    def date_range(self) -> tuple[Optional[str], Optional[str]]:
        """(oldest, newest) commit dates, or (None, None) when empty."""
        if not self.commits:
            return None, None
        return self.commits[-1].date, self.commits[0].date


@dataclass(frozen=True)
class ChurnTotals:
    total_added: int
    total_removed: int
    avg_change_size: int  # mean added+removed lines per commit, rounded


def build_aggregate(
    commits: Sequence[CommitRecord],
    file_lists: Sequence[Optional[Sequence[str]]],
    urgent_pattern: str = DEFAULT_URGENT_PATTERN,
) -> RepositoryAggregate:
    """Group commits by author, touched file and month.

    ``file_lists[i]`` holds the files changed by ``commits[i]``, or None when
    the commit had no resolvable parent; such commits are left out of the
    per-file bucket only.
    """
    if len(commits) != len(file_lists):
        raise ValueError("commits and file_lists must have the same length")

    urgent_re = re.compile(urgent_pattern, re.IGNORECASE)
    aggregate = RepositoryAggregate(commits=list(commits))

    for commit, files in zip(commits, file_lists):
        aggregate.by_author[commit.author] += 1
        aggregate.by_month[commit.month] += 1
        if urgent_re.search(commit.message):
            aggregate.urgent_commits.append(commit)
        if files is not None:
            aggregate.by_file.update(files)

    return aggregate


async def aggregate_commits(
    source: GitSource,
    since: Optional[str] = None,
    urgent_pattern: str = DEFAULT_URGENT_PATTERN,
) -> RepositoryAggregate:
    """Aggregate the repository-wide commit stream, optionally since a date."""
    commits = await source.log(since=since)
    file_lists = await asyncio.gather(*(_files_or_none(source, c) for c in commits))
    aggregate = build_aggregate(commits, file_lists, urgent_pattern)
    logger.debug(
        "Aggregated %d commits: %d authors, %d files, %d months",
        aggregate.total_commits,
        len(aggregate.by_author),
        len(aggregate.by_file),
        len(aggregate.by_month),
    )
    return aggregate


async def _files_or_none(source: GitSource, commit: CommitRecord) -> Optional[list[str]]:
    try:
        return await source.changed_files(commit.hash)
    except QueryFailed:
        # Root commit: no parent to diff against
        return None


def top_n(bucket: Mapping[str, int], n: int) -> list[tuple[str, int]]:
    """The ``n`` largest entries, count descending, ties in insertion order."""
    if n <= 0:
        return []
    # sorted() is stable, so equal counts keep the mapping's first-seen order
    return sorted(bucket.items(), key=lambda item: -item[1])[:n]


def timeline(by_month: Mapping[str, int]) -> list[tuple[str, int]]:
    """Monthly counts in ascending month order."""
    return sorted(by_month.items(), key=lambda item: item[0])


def churn_totals(history: Sequence[CommitRecord]) -> ChurnTotals:
    """Running added/removed totals over a file history with change stats."""
    if not history:
        return ChurnTotals(0, 0, 0)

    total_added = 0
    total_removed = 0
    for commit in history:
        if commit.changes is not None:
            total_added += commit.changes.added
            total_removed += commit.changes.removed

    avg = math.floor((total_added + total_removed) / len(history) + 0.5)
    return ChurnTotals(total_added=total_added, total_removed=total_removed, avg_change_size=avg)
