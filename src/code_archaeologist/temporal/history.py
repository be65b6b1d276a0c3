"""Per-file commit timelines built from the git source and parsers."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Iterable, Optional, Sequence

from ..config import DEFAULT_SEARCH_KEYWORDS
from ..exceptions import QueryFailed
from ..logging_config import get_logger
from .clock import Clock, days_ago, system_clock
from .git_source import GitSource
from .models import (
    ZERO_STAT,
    BlameEntry,
    ChangeStat,
    CommitInfo,
    CommitRecord,
    FileTimeline,
    RelatedFile,
)
from .parsers import parse_blame, parse_diff

logger = get_logger(__name__)


class EntityHistoryBuilder:
    """Compose git queries into per-file history facts.

    Mandatory queries (the file's own log) propagate their errors. Optional
    sub-queries (a single commit's diff, blame, creation lookup) degrade to
    empty or zero-valued defaults.
    """

    def __init__(self, source: GitSource, clock: Clock = system_clock):
        self.source = source
        self.clock = clock

    async def get_file_history(
        self, path: str, depth: int = 10, include_stats: bool = True
    ) -> list[CommitRecord]:
        """Up to ``depth`` commits touching ``path``, newest first."""
        commits = await self.source.log(path=path, max_count=depth)
        if not include_stats or not commits:
            return commits

        stats = await asyncio.gather(*(self._change_stat(c.hash, path) for c in commits))
        return [commit.with_changes(stat) for commit, stat in zip(commits, stats)]

    async def _change_stat(self, commit_hash: str, path: str) -> ChangeStat:
        try:
            diff = await self.source.diff(f"{commit_hash}~1", commit_hash, path=path)
        except QueryFailed as e:
            # Root commits have no parent to diff against
            logger.debug("No diff for %s in %s: %s", path, commit_hash[:7], e.reason)
            return ZERO_STAT
        return parse_diff(diff)

    async def get_file_creation_info(self, path: str) -> Optional[CommitInfo]:
        """The oldest commit that added ``path``, or None if none is found."""
        try:
            added = await self.source.log(path=path, diff_filter="A")
        except QueryFailed as e:
            logger.debug("Creation lookup failed for %s: %s", path, e.reason)
            return None
        if not added:
            return None
        return self._commit_info(added[-1])

    async def get_last_modification(self, path: str) -> Optional[CommitInfo]:
        """The newest commit touching ``path``, or None if none is found."""
        try:
            latest = await self.source.log(path=path, max_count=1)
        except QueryFailed as e:
            logger.debug("Last-modification lookup failed for %s: %s", path, e.reason)
            return None
        if not latest:
            return None
        return self._commit_info(latest[0])

    async def search_commits(
        self,
        path: str,
        keywords: Iterable[str] = DEFAULT_SEARCH_KEYWORDS,
        depth: int = 50,
    ) -> list[CommitRecord]:
        """Commits whose message or body contains any keyword (case-insensitive)."""
        history = await self.get_file_history(path, depth=depth)
        return filter_by_keywords(history, keywords)

    async def get_related_files(
        self, path: str, limit: int = 5, depth: int = 20
    ) -> list[RelatedFile]:
        """Files most often changed in the same commits as ``path``."""
        history = await self.source.log(path=path, max_count=depth)
        file_lists = await asyncio.gather(*(self._files_in(c.hash) for c in history))

        counts: Counter[str] = Counter()
        for files in file_lists:
            counts.update(f for f in files if f != path)

        # Counter.most_common keeps first-seen order among equal counts
        return [RelatedFile(file=f, commits=n) for f, n in counts.most_common(limit)]

    async def _files_in(self, commit_hash: str) -> list[str]:
        try:
            return await self.source.changed_files(commit_hash)
        except QueryFailed as e:
            logger.debug("No file list for %s: %s", commit_hash[:7], e.reason)
            return []

    async def get_blame(self, path: str, start_line: int, end_line: int) -> list[BlameEntry]:
        """Distinct commits attributed to a line range, newest-edited first-seen."""
        try:
            raw = await self.source.blame(path, start_line, end_line)
        except QueryFailed as e:
            logger.debug("Blame failed for %s:%d-%d: %s", path, start_line, end_line, e.reason)
            return []
        return parse_blame(raw)

    async def get_file_timeline(
        self,
        path: str,
        keywords: Iterable[str] = DEFAULT_SEARCH_KEYWORDS,
        related_limit: int = 5,
        related_depth: int = 20,
        search_depth: int = 50,
    ) -> FileTimeline:
        """Fetch creation, last modification, related files and keyword hits together.

        The four lookups are independent and run concurrently; the first
        failure aborts the group.
        """
        created, last_modified, related, keyword_commits = await asyncio.gather(
            self.get_file_creation_info(path),
            self.get_last_modification(path),
            self.get_related_files(path, limit=related_limit, depth=related_depth),
            self.search_commits(path, keywords=keywords, depth=search_depth),
        )
        return FileTimeline(
            created=created,
            last_modified=last_modified,
            related_files=related,
            keyword_commits=keyword_commits,
        )

    def _commit_info(self, commit: CommitRecord) -> CommitInfo:
        return CommitInfo(
            hash=commit.hash,
            date=commit.date,
            author=commit.author,
            message=commit.message,
            days_ago=days_ago(commit.date, self.clock()),
        )


def filter_by_keywords(
    commits: Sequence[CommitRecord], keywords: Iterable[str]
) -> list[CommitRecord]:
    """Commits whose ``message + body`` contains any keyword, case-insensitively."""
    lowered = [k.lower() for k in keywords]
    return [
        c for c in commits if any(k in f"{c.message} {c.body}".lower() for k in lowered)
    ]
