"""Rich rendering for the four analysis results."""

from typing import Sequence

from rich.markup import escape
from rich.table import Table

from ..analyzers import DeadCodeScan, FileAnalysis, FunctionAnalysis, RepositoryAnalysis
from ..insights import Insight, Recommendation
from ._common import console

_SEVERITY_STYLE = {"high": "red", "medium": "yellow", "info": "cyan", "low": "blue"}
_HEALTH_STYLE = {"good": "green", "fair": "yellow", "poor": "red"}
_MESSAGE_WIDTH = 60


def _clip(text: str, width: int = _MESSAGE_WIDTH) -> str:
    text = text.replace("\n", " ")
    return text if len(text) <= width else text[: width - 3] + "..."


def _print_insights(title: str, insights: Sequence[Insight]) -> None:
    if not insights:
        return
    console.print(f"[bold]{title}[/bold]")
    for insight in insights:
        style = _SEVERITY_STYLE.get(insight.severity, "white")
        console.print(f"  [{style}]{insight.severity.upper():<6}[/{style}] {escape(insight.message)}")
        for evidence in insight.evidence[:2]:
            if hasattr(evidence, "short_hash"):
                console.print(
                    f"         [dim]{evidence.date[:10]} ({evidence.short_hash}): "
                    f"{escape(_clip(evidence.message))}[/dim]"
                )
        if insight.suggestion:
            console.print(f"         [dim]{escape(insight.suggestion)}[/dim]")
    console.print()


def _print_recommendations(recommendations: Sequence[Recommendation]) -> None:
    if not recommendations:
        return
    console.print("[bold green]Recommendations[/bold green]")
    for rec in recommendations:
        style = _SEVERITY_STYLE.get(rec.priority, "white")
        console.print(f"  [{style}]{rec.priority.upper():<6}[/{style}] {rec.type}: {escape(rec.message)}")
    console.print()


def render_file(result: FileAnalysis) -> None:
    meta = result.metadata
    console.print()
    console.print(f"[bold cyan]FILE[/bold cyan] {escape(result.file)}")
    console.print()

    created = meta.created
    last = meta.last_modified
    console.print("[bold]Metadata[/bold]")
    console.print(
        f"  Created:        {created.date if created else 'Unknown'} "
        f"by {escape(created.author) if created else 'Unknown'}"
    )
    console.print(
        f"  Last modified:  {last.date if last else 'Unknown'} "
        f"({last.days_ago if last else 'N/A'} days ago)"
    )
    console.print(f"  Total commits:  {meta.total_commits}")
    console.print(f"  Unique authors: {meta.unique_authors}")
    console.print()

    console.print("[bold]Statistics[/bold]")
    console.print(f"  Lines added:    {result.churn.total_added}")
    console.print(f"  Lines removed:  {result.churn.total_removed}")
    console.print(f"  Avg change:     {result.churn.avg_change_size} lines")
    console.print(
        f"  Velocity:       {result.velocity.band} "
        f"({result.velocity.commits_per_month:.2f} commits/month)"
    )
    console.print()

    if result.narrative.summary:
        label = "Narrative" if result.narrative.generated else "Summary"
        console.print(f"[bold yellow]{label}[/bold yellow]")
        console.print(f"[dim]{escape(result.narrative.summary)}[/dim]")
        console.print()

    _print_insights("Code smells", result.code_smells)
    _print_recommendations(result.recommendations)

    if result.history:
        table = Table(title="Recent commits", show_lines=False, pad_edge=True)
        table.add_column("Date")
        table.add_column("Hash")
        table.add_column("Author")
        table.add_column("Message")
        table.add_column("+/-", justify="right")
        for commit in result.history:
            changes = commit.changes
            delta = f"+{changes.added}/-{changes.removed}" if changes else ""
            table.add_row(
                commit.date[:10],
                commit.short_hash,
                escape(commit.author),
                escape(_clip(commit.message, 50)),
                delta,
            )
        console.print(table)
        console.print()

    if result.related_files:
        console.print("[bold]Frequently changed together[/bold]")
        for related in result.related_files:
            console.print(f"  {escape(related.file)} [dim]({related.commits} commits)[/dim]")
        console.print()


def render_function(result: FunctionAnalysis) -> None:
    loc = result.location
    metrics = result.metrics
    console.print()
    console.print(
        f"[bold cyan]FUNCTION[/bold cyan] {escape(result.name)} "
        f"[dim]{escape(result.file)}:{loc.start_line}-{loc.end_line}[/dim]"
    )
    console.print()
    console.print("[bold]Metrics[/bold]")
    console.print(f"  Lines:          {loc.line_count}")
    console.print(
        f"  Complexity:     {metrics.complexity.level} ({metrics.complexity.score}, approximate)"
    )
    console.print(f"  Stability:      {metrics.stability}")
    console.print(f"  Contributors:   {metrics.contributors}")
    console.print(f"  Last modified:  {metrics.last_modified or 'Unknown'}")
    console.print()

    if result.narrative.summary:
        console.print("[bold yellow]Summary[/bold yellow]")
        console.print(f"[dim]{escape(result.narrative.summary)}[/dim]")
        console.print()

    if result.blame:
        console.print("[bold]Blame[/bold]")
        for entry in result.blame:
            console.print(
                f"  {entry.short_hash} {escape(entry.author or 'Unknown')}: "
                f"{escape(_clip(entry.message or ''))}"
            )
        console.print()

    if result.related_commits:
        console.print("[bold]Related commits[/bold]")
        for commit in result.related_commits:
            console.print(
                f"  {commit.date[:10]} ({commit.short_hash}) {escape(_clip(commit.message))}"
            )
        console.print()

    _print_recommendations(result.recommendations)


def render_dead_code(result: DeadCodeScan) -> None:
    console.print()
    console.print(
        f"[bold cyan]DEAD CODE SCAN[/bold cyan] {escape(result.directory)} "
        f"[dim]({result.total_files} files, threshold {result.threshold_days} days)[/dim]"
    )
    console.print()

    for title, points, style in (
        ("Dead", result.dead, "red"),
        ("Suspicious", result.suspicious, "yellow"),
    ):
        if not points:
            continue
        table = Table(title=f"[{style}]{title}[/{style}]", pad_edge=True)
        table.add_column("File")
        table.add_column("Days", justify="right")
        table.add_column("Author")
        table.add_column("Last commit")
        for point in points:
            table.add_row(
                escape(point.path),
                str(point.days_ago),
                escape(point.author),
                escape(_clip(point.last_commit_message, 40)),
            )
        console.print(table)
        console.print()

    console.print(f"[green]{len(result.active)} active files[/green]")
    console.print()
    _print_insights("Insights", result.insights)


def render_repository(result: RepositoryAnalysis) -> None:
    health = result.health
    oldest, newest = result.date_range
    console.print()
    console.print("[bold cyan]REPOSITORY[/bold cyan]")
    console.print(
        f"  {result.total_commits} commits by {result.unique_authors} authors "
        f"[dim]({oldest or 'Unknown'} .. {newest or 'Unknown'})[/dim]"
    )
    console.print()

    style = _HEALTH_STYLE.get(health.overall_health, "white")
    console.print("[bold]Health[/bold]")
    console.print(
        f"  Overall:        [{style}]{health.overall_health}[/{style}] ({health.health_score}/100)"
    )
    console.print(f"  Bug-fix ratio:  {health.bug_fix_ratio}%")
    console.print(f"  Concentration:  {health.change_concentration}%")
    console.print(f"  Activity trend: {health.activity_trend}")
    console.print()

    for title, rows, label in (
        ("Most changed files", result.top_files, "File"),
        ("Top contributors", result.top_contributors, "Author"),
        ("Monthly activity", result.timeline, "Month"),
    ):
        if not rows:
            continue
        table = Table(title=title, pad_edge=True)
        table.add_column(label)
        table.add_column("Commits", justify="right")
        for key, count in rows:
            table.add_row(escape(key), str(count))
        console.print(table)
        console.print()

    _print_insights("Insights", result.insights)
