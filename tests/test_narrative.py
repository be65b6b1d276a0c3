"""Tests for narrative.py - provider dispatch and deterministic fallbacks."""

import pytest

from code_archaeologist.narrative import (
    explain_file,
    explain_function,
    extract_section,
    fallback_file_summary,
    fallback_function_summary,
    split_sections,
)
from code_archaeologist.temporal.models import CommitInfo, CommitRecord

PROVIDER_TEXT = (
    "**Original Purpose**: Parse requests.\n"
    "**Evolution**: Grew a cache.\n"
    "**Current Status**: Stable.\n"
    "**Red Flags**: None."
)


def make_commit(n: int, message: str, date: str = "2024-01-01T00:00:00+00:00") -> CommitRecord:
    return CommitRecord(hash=f"{n:040x}", date=date, author="Alice", message=message)


def make_info(days: int) -> CommitInfo:
    return CommitInfo(
        hash="a" * 40, date="2024-01-01T00:00:00+00:00", author="Alice", message="x", days_ago=days
    )


class StaticProvider:
    def __init__(self):
        self.calls = []

    async def explain_file(self, path, history, metadata):
        self.calls.append(("file", path, metadata))
        return PROVIDER_TEXT

    async def explain_function(self, function_name, history, related_commits):
        self.calls.append(("function", function_name))
        return f"{function_name} handles requests."


class FailingProvider:
    async def explain_file(self, path, history, metadata):
        raise RuntimeError("service down")

    async def explain_function(self, function_name, history, related_commits):
        raise RuntimeError("service down")


class TestExplainFile:
    @pytest.mark.asyncio
    async def test_provider_text_and_sections(self):
        provider = StaticProvider()
        created = make_info(10)
        narrative = await explain_file(provider, "app.js", [], created, None)

        assert narrative.generated is True
        assert narrative.summary == PROVIDER_TEXT
        assert narrative.sections["Original Purpose"] == "Parse requests."
        assert narrative.sections["Red Flags"] == "None."
        assert provider.calls[0][2] == {"created": created, "last_modified": None}

    @pytest.mark.asyncio
    async def test_failing_provider_falls_back(self):
        narrative = await explain_file(FailingProvider(), "app.js", [], make_info(800), make_info(400))

        assert narrative.generated is False
        assert "Legacy code (2+ years old)" in narrative.summary

    @pytest.mark.asyncio
    async def test_no_provider(self):
        narrative = await explain_file(None, "app.js", [], make_info(10), make_info(1))
        assert narrative.generated is False
        assert narrative.summary == ""


class TestExplainFunction:
    @pytest.mark.asyncio
    async def test_provider(self):
        narrative = await explain_function(StaticProvider(), "handle", [], [])
        assert narrative.summary == "handle handles requests."
        assert narrative.generated is True

    @pytest.mark.asyncio
    async def test_failing_provider_falls_back(self):
        narrative = await explain_function(FailingProvider(), "handle", [], [])
        assert narrative.summary == 'Function "handle" has no git history available.'


class TestFallbacks:
    def test_file_summary_flags(self):
        history = [make_commit(i, "fix bug") for i in range(4)]
        summary = fallback_file_summary(history, make_info(800), make_info(400))
        assert summary.split("\n") == [
            "Legacy code (2+ years old)",
            "Inactive (no changes in 1+ year)",
            "High bug activity (4 fixes found)",
        ]

    def test_file_summary_quiet(self):
        history = [make_commit(i, "fix") for i in range(3)]
        assert fallback_file_summary(history, make_info(100), make_info(10)) == ""

    def test_function_summary(self):
        related = [
            make_commit(2, "Fix overflow", "2024-02-01T00:00:00+00:00"),
            make_commit(1, "Add parser", "2024-01-01T00:00:00+00:00"),
        ]
        summary = fallback_function_summary("parse", related)
        assert summary.startswith("parse was introduced in 2024-01-01T00:00:00+00:00 (Add parser).")
        assert "Last modified 2024-02-01T00:00:00+00:00 (Fix overflow)." in summary
        assert "Total commits: 2." in summary


class TestSections:
    def test_extract_section(self):
        assert extract_section(PROVIDER_TEXT, "Evolution", "Current Status") == "Grew a cache."

    def test_missing_section(self):
        assert extract_section("plain text", "Evolution") == ""

    def test_split_sections_skips_missing(self):
        sections = split_sections("**Evolution**: Grew.")
        assert sections == {"Evolution": "Grew."}
