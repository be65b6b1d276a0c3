"""End-to-end analyses over temporary repositories with dated commits."""

import json

import pytest

from code_archaeologist.analyzers import (
    analyze_file,
    analyze_function,
    analyze_repository,
    detect_dead_code,
)
from code_archaeologist.config import AnalysisConfig
from code_archaeologist.exceptions import InvalidConfigError, NotFound, SourceUnavailable


class RecordingNarrator:
    def __init__(self):
        self.files = []

    async def explain_file(self, path, history, metadata):
        self.files.append((path, len(history)))
        return "**Original Purpose**: Serve requests."

    async def explain_function(self, function_name, history, related_commits):
        return f"{function_name}: {len(related_commits)} related"


class TestAnalyzeFile:
    """File analysis on the three-commit app repository."""

    @pytest.mark.asyncio
    async def test_metadata_and_stats(self, app_repo, clock):
        result = await analyze_file("app.js", repo_path=app_repo.path, clock=clock)

        assert result.type == "file"
        assert result.file == "app.js"
        assert result.metadata.total_commits == 3
        assert result.metadata.unique_authors == 2
        assert result.metadata.created.hash == app_repo.hashes[0]
        assert result.metadata.last_modified.days_ago == 306

        assert result.churn.total_added == 6
        assert result.churn.total_removed == 2
        assert result.churn.avg_change_size == 3

        # 3 commits over 60 days
        assert result.velocity.commits_per_month == pytest.approx(1.5)
        assert result.velocity.band == "low"

    @pytest.mark.asyncio
    async def test_related_smells_and_recommendations(self, app_repo, clock):
        result = await analyze_file("app.js", repo_path=app_repo.path, clock=clock)

        assert [(r.file, r.commits) for r in result.related_files] == [("util.js", 2)]
        assert [c.hash for c in result.urgent_commits] == [app_repo.hashes[1]]
        assert [s.type for s in result.code_smells] == ["panic_driven"]
        assert [r.type for r in result.recommendations] == [
            "technical_debt",
            "maintenance_needed",
        ]

    @pytest.mark.asyncio
    async def test_fallback_narrative(self, app_repo, clock):
        result = await analyze_file("app.js", repo_path=app_repo.path, clock=clock)
        assert result.narrative.generated is False

    @pytest.mark.asyncio
    async def test_provider_narrative(self, app_repo, clock):
        narrator = RecordingNarrator()
        result = await analyze_file(
            "app.js", repo_path=app_repo.path, clock=clock, narrator=narrator
        )
        assert narrator.files == [("app.js", 3)]
        assert result.narrative.sections == {"Original Purpose": "Serve requests."}

    @pytest.mark.asyncio
    async def test_depth_limits_history(self, app_repo, clock):
        result = await analyze_file("app.js", repo_path=app_repo.path, clock=clock, depth=1)
        assert result.metadata.total_commits == 1

    @pytest.mark.asyncio
    async def test_config_depth(self, app_repo, clock):
        result = await analyze_file(
            "app.js", repo_path=app_repo.path, clock=clock, config=AnalysisConfig(history_depth=2)
        )
        assert result.metadata.total_commits == 2

    @pytest.mark.asyncio
    async def test_json_shape(self, app_repo, clock):
        result = await analyze_file("app.js", repo_path=app_repo.path, clock=clock)
        data = json.loads(json.dumps(result.to_dict()))

        assert data["type"] == "file"
        assert data["stats"]["change_velocity"] == "low"
        assert data["stats"]["velocity_value"] == 1.5
        assert data["history"][0]["hash"] == app_repo.hashes[2][:7]
        assert data["history"][1]["changes"] == {"added": 5, "removed": 1}

    @pytest.mark.asyncio
    async def test_missing_file(self, app_repo, clock):
        with pytest.raises(NotFound):
            await analyze_file("missing.js", repo_path=app_repo.path, clock=clock)

    @pytest.mark.asyncio
    async def test_untracked_file(self, app_repo, clock):
        app_repo.write("scratch.js", "let a;\n")
        with pytest.raises(SourceUnavailable):
            await analyze_file("scratch.js", repo_path=app_repo.path, clock=clock)

    @pytest.mark.asyncio
    async def test_not_a_repository(self, tmp_path, clock):
        (tmp_path / "a.py").write_text("x = 1\n")
        with pytest.raises(SourceUnavailable):
            await analyze_file("a.py", repo_path=tmp_path, clock=clock)


class TestAnalyzeFunction:
    @pytest.mark.asyncio
    async def test_function_metrics(self, app_repo, clock):
        result = await analyze_function(
            "app.js", "handleRequest", repo_path=app_repo.path, clock=clock
        )

        assert result.type == "function"
        assert (result.location.start_line, result.location.end_line) == (1, 10)
        assert [b.hash for b in result.blame] == app_repo.hashes[:2]
        assert result.metrics.contributors == 2
        # if + && + for
        assert result.metrics.complexity.score == 4
        assert result.metrics.complexity.level == "low"
        assert [c.hash for c in result.related_commits] == [app_repo.hashes[1]]
        assert result.metrics.stability == "never modified"
        assert result.metrics.last_modified == "2024-02-01T12:00:00+00:00"
        assert result.metrics.age_days == 366
        assert result.recommendations == []

    @pytest.mark.asyncio
    async def test_fallback_narrative(self, app_repo, clock):
        result = await analyze_function(
            "app.js", "handleRequest", repo_path=app_repo.path, clock=clock
        )
        assert result.narrative.summary.startswith(
            "handleRequest was introduced in 2024-02-01T12:00:00+00:00"
        )

    @pytest.mark.asyncio
    async def test_provider_narrative(self, app_repo, clock):
        result = await analyze_function(
            "app.js",
            "handleRequest",
            repo_path=app_repo.path,
            clock=clock,
            narrator=RecordingNarrator(),
        )
        assert result.narrative.summary == "handleRequest: 1 related"

    @pytest.mark.asyncio
    async def test_explicit_lines(self, app_repo, clock):
        result = await analyze_function(
            "app.js", "other", repo_path=app_repo.path, lines="12-14", clock=clock
        )
        assert [b.hash for b in result.blame] == [app_repo.hashes[0], app_repo.hashes[2]]

    @pytest.mark.asyncio
    async def test_unknown_function(self, app_repo, clock):
        with pytest.raises(NotFound) as exc_info:
            await analyze_function("app.js", "nope", repo_path=app_repo.path, clock=clock)
        assert exc_info.value.location == "app.js"

    @pytest.mark.asyncio
    async def test_lines_past_end_of_file(self, app_repo, clock):
        with pytest.raises(InvalidConfigError):
            await analyze_function(
                "app.js", "other", repo_path=app_repo.path, lines="500-510", clock=clock
            )

    @pytest.mark.asyncio
    async def test_json_shape(self, app_repo, clock):
        result = await analyze_function(
            "app.js", "handleRequest", repo_path=app_repo.path, clock=clock
        )
        data = json.loads(json.dumps(result.to_dict()))
        assert data["function"]["line_range"] == "1-10"
        assert data["metrics"]["complexity"] == {"score": 4, "level": "low"}


class TestDetectDeadCode:
    @pytest.fixture
    def aged_repo(self, git_repo):
        git_repo.commit(
            "Add old modules",
            {"old.py": "a = 1\n", "sub/deep.py": "b = 1\n", "notes.txt": "hi\n"},
            date="2023-06-01T12:00:00+00:00",
        )
        git_repo.commit("Add mid", {"mid.py": "c = 1\n"}, date="2024-03-01T12:00:00+00:00")
        git_repo.commit("Add new", {"new.js": "d = 1\n"}, date="2024-12-01T12:00:00+00:00")
        git_repo.write("untracked.py", "e = 1\n")
        return git_repo

    @pytest.mark.asyncio
    async def test_classification(self, aged_repo, clock):
        result = await detect_dead_code(aged_repo.path, clock=clock)

        assert result.type == "dead_code_scan"
        assert result.total_files == 4
        assert result.threshold_days == 365
        assert [(p.path, p.days_ago) for p in result.dead] == [("old.py", 580)]
        assert [(p.path, p.days_ago) for p in result.suspicious] == [("mid.py", 306)]
        assert [p.path for p in result.active] == ["new.js"]
        assert result.dead[0].last_commit_message == "Add old modules"

    @pytest.mark.asyncio
    async def test_insights(self, aged_repo, clock):
        result = await detect_dead_code(aged_repo.path, clock=clock)
        assert [i.type for i in result.insights] == ["summary", "oldest", "pattern"]
        assert result.insights[0].message == "Found 1 files (25.0%) untouched for 365+ days"

    @pytest.mark.asyncio
    async def test_recursive(self, aged_repo, clock):
        result = await detect_dead_code(aged_repo.path, recursive=True, clock=clock)
        assert sorted(p.path for p in result.dead) == ["old.py", "sub/deep.py"]
        assert result.total_files == 5

    @pytest.mark.asyncio
    async def test_custom_threshold(self, aged_repo, clock):
        result = await detect_dead_code(aged_repo.path, threshold_days=30, clock=clock)
        assert sorted(p.path for p in result.dead) == ["mid.py", "new.js", "old.py"]
        assert result.active == []

    @pytest.mark.asyncio
    async def test_subdirectory(self, aged_repo, clock):
        result = await detect_dead_code(aged_repo.path / "sub", clock=clock)
        assert [p.path for p in result.dead] == ["deep.py"]

    @pytest.mark.asyncio
    async def test_not_a_repository(self, tmp_path, clock):
        with pytest.raises(SourceUnavailable):
            await detect_dead_code(tmp_path, clock=clock)

    @pytest.mark.asyncio
    async def test_json_shape(self, aged_repo, clock):
        data = (await detect_dead_code(aged_repo.path, clock=clock)).to_dict()
        assert data["dead_code"][0]["path"] == "old.py"
        assert set(data) >= {"dead_code", "suspicious", "active", "insights", "total_files"}


class TestAnalyzeRepository:
    @pytest.mark.asyncio
    async def test_summary_and_health(self, app_repo, clock):
        result = await analyze_repository(app_repo.path, clock=clock)

        assert result.type == "repository"
        assert result.total_commits == 3
        assert result.unique_authors == 2
        assert result.date_range == ("2024-01-01T12:00:00+00:00", "2024-03-01T12:00:00+00:00")
        assert result.top_files == [("app.js", 2), ("util.js", 2)]
        assert result.top_contributors == [("Alice", 2), ("Bob", 1)]
        assert [c.hash for c in result.urgent_commits] == [app_repo.hashes[1]]
        assert result.timeline == [("2024-01", 1), ("2024-02", 1), ("2024-03", 1)]

        health = result.health
        assert health.bug_fix_ratio == 33.3
        assert health.change_concentration == 133.3
        assert health.activity_trend == "stable"
        assert health.health_score == 50
        assert health.overall_health == "fair"
        assert [i.type for i in result.insights] == ["health", "quality", "hotspot"]

    @pytest.mark.asyncio
    async def test_single_git_process(self, app_repo, clock):
        config = AnalysisConfig(max_concurrent_git=1)
        result = await analyze_repository(app_repo.path, config=config, clock=clock)
        assert result.total_commits == 3
        assert result.top_files == [("app.js", 2), ("util.js", 2)]

    @pytest.mark.asyncio
    async def test_top(self, app_repo, clock):
        result = await analyze_repository(app_repo.path, top=1, clock=clock)
        assert result.top_files == [("app.js", 2)]
        assert result.top_contributors == [("Alice", 2)]

    @pytest.mark.asyncio
    async def test_since(self, app_repo, clock):
        result = await analyze_repository(app_repo.path, since="2024-01-15", clock=clock)
        assert result.total_commits == 2
        assert result.urgent_commits[0].message == "Fix bug in handleRequest"

    @pytest.mark.asyncio
    async def test_empty_repository(self, git_repo, clock):
        result = await analyze_repository(git_repo.path, clock=clock)
        assert result.total_commits == 0
        assert result.date_range == (None, None)
        assert result.health.health_score == 100

    @pytest.mark.asyncio
    async def test_json_shape(self, app_repo, clock):
        data = (await analyze_repository(app_repo.path, clock=clock)).to_dict()
        assert data["summary"]["date_range"]["from"] == "2024-01-01T12:00:00+00:00"
        assert data["top_files"][0] == {"file": "app.js", "commits": 2}
        assert data["health_metrics"]["overall_health"] == "fair"
