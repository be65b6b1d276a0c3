"""Data models for git history mining."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Optional

SHORT_HASH_LENGTH = 7


@dataclass(frozen=True)
class ChangeStat:
    """Added/removed content lines of one commit for one path."""

    added: int = 0
    removed: int = 0

    @property
    def total(self) -> int:
        return self.added + self.removed


ZERO_STAT = ChangeStat(0, 0)


@dataclass(frozen=True)
class CommitRecord:
    hash: str  # full 40-hex id
    date: str  # ISO 8601 author date
    author: str
    message: str  # subject line
    body: str = ""
    changes: Optional[ChangeStat] = None  # set when stats were requested for a path

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]

    @property
    def month(self) -> str:
        """Calendar month of the commit date as YYYY-MM."""
        return self.date[:7]

    def with_changes(self, changes: ChangeStat) -> CommitRecord:
        return replace(self, changes=changes)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "hash": self.short_hash,
            "date": self.date,
            "author": self.author,
            "message": self.message,
            "body": self.body,
        }
        if self.changes is not None:
            data["changes"] = asdict(self.changes)
        return data


@dataclass(frozen=True)
class BlameEntry:
    hash: str
    author: Optional[str] = None
    message: Optional[str] = None  # None when the porcelain block had no summary

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]

    def to_dict(self) -> dict[str, Any]:
        return {"hash": self.short_hash, "author": self.author, "message": self.message}


@dataclass(frozen=True)
class CommitInfo:
    """A single dated commit fact: when a file was created or last touched."""

    hash: str
    date: str
    author: str
    message: str
    days_ago: int

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.short_hash,
            "date": self.date,
            "author": self.author,
            "message": self.message,
            "days_ago": self.days_ago,
        }


@dataclass(frozen=True)
class FileTimePoint:
    """When a file was last touched, relative to a fixed "now"."""

    path: str
    date: str
    days_ago: int
    author: str
    last_commit_message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RelatedFile:
    file: str
    commits: int  # commits shared with the queried path

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileTimeline:
    """The per-file facts fetched together for a file analysis."""

    created: Optional[CommitInfo]
    last_modified: Optional[CommitInfo]
    related_files: list[RelatedFile]
    keyword_commits: list[CommitRecord]
