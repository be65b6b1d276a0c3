"""Narrative explanations: pluggable provider plus deterministic fallback.

The engine never talks to a language model itself. A provider implementing
:class:`NarrativeProvider` may be supplied by the caller; when none is given,
or when it raises, the fallback text below is used. Fallbacks only restate
counts and dates that were already computed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from .logging_config import get_logger
from .temporal.models import CommitInfo, CommitRecord

logger = get_logger(__name__)

FILE_SECTIONS = ("Original Purpose", "Evolution", "Current Status", "Red Flags")
_FALLBACK_FIX_RE = re.compile(r"fix|bug|hotfix", re.IGNORECASE)

LEGACY_DAYS = 730
INACTIVE_DAYS = 365
BUG_ACTIVITY_COUNT = 3


class NarrativeProvider(Protocol):
    async def explain_file(
        self,
        path: str,
        history: Sequence[CommitRecord],
        metadata: dict[str, Optional[CommitInfo]],
    ) -> str: ...

    async def explain_function(
        self,
        function_name: str,
        history: Sequence[CommitRecord],
        related_commits: Sequence[CommitRecord],
    ) -> str: ...


@dataclass(frozen=True)
class Narrative:
    summary: str
    sections: dict[str, str] = field(default_factory=dict)
    generated: bool = False  # True when produced by a provider, False for fallback

    def to_dict(self) -> dict[str, Any]:
        return {"summary": self.summary, "sections": self.sections, "generated": self.generated}


async def explain_file(
    provider: Optional[NarrativeProvider],
    path: str,
    history: Sequence[CommitRecord],
    created: Optional[CommitInfo],
    last_modified: Optional[CommitInfo],
) -> Narrative:
    if provider is not None:
        metadata = {"created": created, "last_modified": last_modified}
        try:
            text = await provider.explain_file(path, history, metadata)
        except Exception as e:
            logger.warning("Narrative provider failed for %s, using fallback: %s", path, e)
        else:
            return Narrative(summary=text, sections=split_sections(text), generated=True)
    return Narrative(summary=fallback_file_summary(history, created, last_modified))


async def explain_function(
    provider: Optional[NarrativeProvider],
    function_name: str,
    history: Sequence[CommitRecord],
    related_commits: Sequence[CommitRecord],
) -> Narrative:
    if provider is not None:
        try:
            text = await provider.explain_function(function_name, history, related_commits)
        except Exception as e:
            logger.warning(
                "Narrative provider failed for %s, using fallback: %s", function_name, e
            )
        else:
            return Narrative(summary=text, generated=True)
    return Narrative(summary=fallback_function_summary(function_name, related_commits))


def fallback_file_summary(
    history: Sequence[CommitRecord],
    created: Optional[CommitInfo],
    last_modified: Optional[CommitInfo],
) -> str:
    lines = []
    if created is not None and created.days_ago > LEGACY_DAYS:
        lines.append("Legacy code (2+ years old)")
    if last_modified is None or last_modified.days_ago > INACTIVE_DAYS:
        lines.append("Inactive (no changes in 1+ year)")
    fixes = sum(1 for c in history if _FALLBACK_FIX_RE.search(c.message))
    if fixes > BUG_ACTIVITY_COUNT:
        lines.append(f"High bug activity ({fixes} fixes found)")
    return "\n".join(lines)


def fallback_function_summary(function_name: str, commits: Sequence[CommitRecord]) -> str:
    if not commits:
        return f'Function "{function_name}" has no git history available.'

    first = commits[-1]
    last = commits[0]
    return (
        f"{function_name} was introduced in {first.date} ({first.message}).\n"
        f"Last modified {last.date} ({last.message}).\n"
        f"Total commits: {len(commits)}.\n"
        "Narrative analysis unavailable."
    )


def extract_section(text: str, marker: str, next_marker: Optional[str] = None) -> str:
    """Body of a ``**Marker**:`` section in a markdown-style response."""
    match = re.search(rf"\*\*{re.escape(marker)}\*\*:?(.+?)(?=\*\*|$)", text, re.DOTALL)
    if not match:
        return ""
    content = match.group(1).strip()
    if next_marker:
        end = content.find(f"**{next_marker}**")
        if end > 0:
            content = content[:end].strip()
    return content


def split_sections(text: str) -> dict[str, str]:
    sections = {}
    for i, marker in enumerate(FILE_SECTIONS):
        next_marker = FILE_SECTIONS[i + 1] if i + 1 < len(FILE_SECTIONS) else None
        content = extract_section(text, marker, next_marker)
        if content:
            sections[marker] = content
    return sections
