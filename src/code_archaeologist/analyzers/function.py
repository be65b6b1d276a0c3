"""Function analysis: locate a function, then mine blame and history for it."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..config import AnalysisConfig, ThresholdConfig
from ..exceptions import InvalidConfigError, NotFound
from ..insights import Recommendation, function_recommendations
from ..logging_config import get_logger
from ..narrative import Narrative, NarrativeProvider, explain_function
from ..scoring import ComplexityEstimate, estimate_complexity, stability_band
from ..temporal.clock import Clock, days_ago, system_clock
from ..temporal.models import BlameEntry, CommitRecord
from ._common import AnalysisContext

logger = get_logger(__name__)

REPORTED_BLAME = 5
REPORTED_RELATED = 10

_LINE_RANGE_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


@dataclass(frozen=True)
class FunctionLocation:
    start_line: int  # 1-based, inclusive
    end_line: int
    code: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class FunctionMetrics:
    complexity: ComplexityEstimate
    stability: str
    contributors: int
    last_modified: Optional[str]
    age_days: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "complexity": self.complexity.to_dict(),
            "stability": self.stability,
            "contributors": self.contributors,
            "last_modified": self.last_modified,
            "age_days": self.age_days,
        }


@dataclass(frozen=True)
class FunctionAnalysis:
    file: str
    name: str
    location: FunctionLocation
    metrics: FunctionMetrics
    blame: list[BlameEntry]
    related_commits: list[CommitRecord]
    narrative: Narrative
    recommendations: list[Recommendation] = field(default_factory=list)

    type = "function"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "file": self.file,
            "function": {
                "name": self.name,
                "line_range": f"{self.location.start_line}-{self.location.end_line}",
                "line_count": self.location.line_count,
                "code": self.location.code,
            },
            "metrics": self.metrics.to_dict(),
            "blame": [b.to_dict() for b in self.blame],
            "related_commits": [c.to_dict() for c in self.related_commits],
            "narrative": self.narrative.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


def _declaration_patterns(name: str) -> list[re.Pattern[str]]:
    n = re.escape(name)
    return [
        re.compile(rf"function\s+{n}\s*\("),
        re.compile(rf"(?:const|let|var)\s+{n}\s*="),
        re.compile(rf"\b{n}\s*:\s*function"),
        re.compile(rf"\b{n}\s*\([^)]*\)\s*\{{"),
        re.compile(rf"\bdef\s+{n}\s*\("),
        re.compile(rf"public.*\s+{n}\s*\("),
    ]


def parse_line_range(value: str) -> tuple[int, int]:
    """Parse ``START-END`` (1-based, inclusive)."""
    match = _LINE_RANGE_RE.match(value)
    if not match:
        raise InvalidConfigError("lines", value, "expected START-END, e.g. 10-50")
    start, end = int(match.group(1)), int(match.group(2))
    if start < 1 or end < start:
        raise InvalidConfigError("lines", value, "range must satisfy 1 <= START <= END")
    return start, end


def find_function(
    content: str, name: str, line_range: Optional[str] = None
) -> Optional[FunctionLocation]:
    """Locate a function by declaration pattern, or take an explicit line range.

    Brace-delimited bodies end where braces balance; ``def`` bodies end at
    the first non-blank line indented no deeper than the ``def``.
    """
    lines = content.split("\n")

    if line_range:
        start, end = parse_line_range(line_range)
        if start > len(lines):
            raise InvalidConfigError(
                "lines", line_range, f"START is past the end of the file ({len(lines)} lines)"
            )
        end = min(end, len(lines))
        return FunctionLocation(start, end, "\n".join(lines[start - 1 : end]))

    patterns = _declaration_patterns(name)
    for i, line in enumerate(lines):
        if not any(p.search(line) for p in patterns):
            continue
        if re.search(rf"\bdef\s+{re.escape(name)}\s*\(", line):
            end_index = _indented_block_end(lines, i)
        else:
            end_index = _brace_block_end(lines, i)
        return FunctionLocation(i + 1, end_index + 1, "\n".join(lines[i : end_index + 1]))

    return None


def _brace_block_end(lines: list[str], start: int) -> int:
    depth = 0
    opened = False
    for j in range(start, len(lines)):
        for char in lines[j]:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
        if opened and depth == 0:
            return j
    # No balanced body found: report the declaration line alone
    return start


def _indented_block_end(lines: list[str], start: int) -> int:
    indent = len(lines[start]) - len(lines[start].lstrip())
    end = start
    for j in range(start + 1, len(lines)):
        stripped = lines[j].strip()
        if not stripped:
            continue
        if len(lines[j]) - len(lines[j].lstrip()) <= indent:
            break
        end = j
    return end


def related_commits(
    history: list[CommitRecord], name: str, thresholds: ThresholdConfig
) -> list[CommitRecord]:
    """Commits that mention the function or changed enough lines to plausibly touch it."""
    needle = name.lower()
    return [
        c
        for c in history
        if needle in c.message.lower()
        or (c.changes is not None and c.changes.total > thresholds.significant_change_lines)
    ]


async def analyze_function(
    path: Union[str, Path],
    name: str,
    repo_path: Union[str, Path] = ".",
    lines: Optional[str] = None,
    config: Optional[AnalysisConfig] = None,
    clock: Clock = system_clock,
    narrator: Optional[NarrativeProvider] = None,
) -> FunctionAnalysis:
    """Analyze one function in a tracked file.

    Raises:
        NotFound: the file or the function does not exist
        InvalidConfigError: ``lines`` is malformed or starts past the end of the file
        SourceUnavailable: the repository cannot be opened or the file is untracked
    """
    ctx = AnalysisContext.create(repo_path, config=config, clock=clock, narrator=narrator)
    cfg = ctx.config
    absolute, rel = ctx.resolve_file(path)

    content = absolute.read_text(encoding="utf-8", errors="replace")
    location = find_function(content, name, lines)
    if location is None:
        raise NotFound("function", name, location=rel)

    await ctx.source.require_tracked(rel)
    logger.debug("Function %s found at %s:%d-%d", name, rel, location.start_line, location.end_line)

    blame, history = await asyncio.gather(
        ctx.builder.get_blame(rel, location.start_line, location.end_line),
        ctx.builder.get_file_history(rel, depth=cfg.function_history_depth),
    )
    related = related_commits(history, name, cfg.thresholds)

    complexity = estimate_complexity(location.code, cfg.thresholds)
    contributors = len({b.author for b in blame if b.author})
    metrics = FunctionMetrics(
        complexity=complexity,
        stability=stability_band(len(related), cfg.thresholds),
        contributors=contributors,
        last_modified=related[0].date if related else None,
        age_days=days_ago(history[-1].date, ctx.clock()) if history else None,
    )
    narrative = await explain_function(ctx.narrator, name, history, related)

    return FunctionAnalysis(
        file=rel,
        name=name,
        location=location,
        metrics=metrics,
        blame=blame[:REPORTED_BLAME],
        related_commits=related[:REPORTED_RELATED],
        narrative=narrative,
        recommendations=function_recommendations(
            complexity, contributors, related, cfg.thresholds, cfg.urgent_pattern
        ),
    )
