"""Parse raw git output (log, diff, blame) into typed records.

Each parser is a single pass over lines with explicit state, so edge cases
such as header-only diffs or blame blocks without a ``summary`` line can be
exercised in isolation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .models import BlameEntry, ChangeStat, CommitRecord

# Separators used in the adapter's --format string
RECORD_SEP = "\x1e"
FIELD_SEP = "\x1f"
LOG_FORMAT = f"{RECORD_SEP}%H{FIELD_SEP}%aI{FIELD_SEP}%an{FIELD_SEP}%s{FIELD_SEP}%b"

_COMMIT_LINE_RE = re.compile(r"^[0-9a-f]{40}")
_LOG_FIELDS = 5


def parse_diff(text: str) -> ChangeStat:
    """Count added and removed content lines in a unified diff.

    ``+++``/``---`` file headers are excluded; counts accumulate across hunks.
    """
    added = 0
    removed = 0
    for line in text.splitlines():
        if line.startswith("+"):
            if not line.startswith("+++"):
                added += 1
        elif line.startswith("-"):
            if not line.startswith("---"):
                removed += 1
    return ChangeStat(added=added, removed=removed)


def parse_name_only(text: str) -> list[str]:
    """Paths listed by ``git diff --name-only``, in output order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


@dataclass
class _BlameBlock:
    hash: str
    author: Optional[str] = None
    message: Optional[str] = None

    def freeze(self) -> BlameEntry:
        return BlameEntry(hash=self.hash, author=self.author, message=self.message)


def parse_blame(porcelain: str) -> list[BlameEntry]:
    """Parse ``git blame --porcelain``/``--line-porcelain`` output.

    A line starting with a 40-hex commit id opens a block; ``author`` and
    ``summary`` lines fill it until the next commit line. Repeated blocks for
    an already-seen commit are skipped, so the result holds one entry per
    distinct commit in order of first appearance.
    """
    entries: list[BlameEntry] = []
    seen: set[str] = set()
    current: Optional[_BlameBlock] = None

    for line in porcelain.splitlines():
        if _COMMIT_LINE_RE.match(line):
            if current is not None:
                entries.append(current.freeze())
            commit_hash = line[:40]
            if commit_hash in seen:
                current = None
            else:
                seen.add(commit_hash)
                current = _BlameBlock(hash=commit_hash)
        elif current is None:
            continue
        elif line.startswith("author "):
            current.author = line[len("author ") :]
        elif line.startswith("summary "):
            current.message = line[len("summary ") :]

    if current is not None:
        entries.append(current.freeze())

    return entries


def parse_log(raw: str) -> list[CommitRecord]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`.

    Records that do not carry all five fields are dropped. Output order is
    git's order (newest first).
    """
    commits: list[CommitRecord] = []
    for record in raw.split(RECORD_SEP):
        if not record.strip():
            continue
        parts = record.split(FIELD_SEP, _LOG_FIELDS - 1)
        if len(parts) < _LOG_FIELDS:
            continue
        commit_hash, date, author, subject, body = parts
        commit_hash = commit_hash.strip()
        if not _COMMIT_LINE_RE.match(commit_hash):
            continue
        commits.append(
            CommitRecord(
                hash=commit_hash,
                date=date.strip(),
                author=author,
                message=subject,
                body=body.strip(),
            )
        )
    return commits
