"""Render aggregated benchmark results to Markdown."""

from datetime import datetime
from typing import Dict, List, Mapping, Optional

from signalbench.report.aggregate import BenchmarkResults
from signalbench.versions import FrameworkVersion

FAILURE_GLYPH = "❌"
MISSING_CELL = "N/A"
TROPHY = "🏆"
MEDALS = ("🥇", "🥈", "🥉")

RESULTS_HEADING = "## Results"
SUMMARY_HEADING = "## Summary"


def format_time(microseconds: float) -> str:
    """Format microseconds in the largest unit that keeps the value readable."""
    if microseconds < 1_000:
        return f"{microseconds:.0f}μs"
    elif microseconds < 1_000_000:
        return f"{microseconds / 1_000:.2f}ms"
    else:
        return f"{microseconds / 1_000_000:.2f}s"


def rank_label(index: int) -> str:
    """Medal for the first three places, 1-based rank number after that."""
    if index < len(MEDALS):
        return MEDALS[index]
    return str(index + 1)


def render_cell(results: BenchmarkResults, test: str, framework: str) -> str:
    outcome = results.results.get(test, {}).get(framework)
    if outcome is None:
        return MISSING_CELL
    if not outcome.passed:
        return FAILURE_GLYPH
    if results.is_win(test, framework):
        return f"**{format_time(outcome.time_micros)}** {TROPHY}"
    return format_time(outcome.time_micros)


def render_results_table(
    results: BenchmarkResults, versions: Optional[Mapping[str, FrameworkVersion]] = None
) -> str:
    """One row per test, one column per framework in ranking order."""
    versions = versions or {}
    headers = [
        versions[f].header_label if f in versions else f for f in results.frameworks
    ]

    lines = [
        "| Test | " + " | ".join(headers) + " |",
        "|------|" + "--------|" * len(results.frameworks),
    ]
    for test in results.tests:
        cells = [render_cell(results, test, f) for f in results.frameworks]
        lines.append(f"| {test} | " + " | ".join(cells) + " |")

    return "\n".join(lines)


def render_summary_table(
    results: BenchmarkResults, labels: Optional[Mapping[str, str]] = None
) -> str:
    """Rank, framework, win count and pass rate, in ranking order.

    Args:
        results: Aggregated results
        labels: Optional framework id -> display label overrides
    """
    labels = labels or {}
    lines = [
        "| Rank | Framework | Wins | Pass Rate |",
        "|------|-----------|------|-----------|",
    ]
    for i, framework in enumerate(results.frameworks):
        stats = results.stats[framework]
        label = labels.get(framework, framework)
        lines.append(f"| {rank_label(i)} | {label} | {stats.wins} | {stats.pass_rate}% |")

    return "\n".join(lines)


def render_markdown_report(
    results: BenchmarkResults,
    versions: Optional[Mapping[str, FrameworkVersion]] = None,
    title: str = "Reactivity Benchmark Report",
    generated_at: Optional[datetime] = None,
) -> str:
    """Generate the combined Markdown report.

    Returns:
        Markdown report as string, ending with a newline
    """
    timestamp = (generated_at or datetime.now()).isoformat()

    report_lines: List[str] = [
        f"# {title}",
        "",
        f"Generated: {timestamp}",
        "",
        RESULTS_HEADING,
        "",
        render_results_table(results, versions),
        "",
        SUMMARY_HEADING,
        "",
        render_summary_table(results),
        "",
    ]

    return "\n".join(report_lines)


def summary_labels(versions: Mapping[str, FrameworkVersion]) -> Dict[str, str]:
    """Linked framework labels for summary tables in downstream documents."""
    return {framework: v.summary_label for framework, v in versions.items()}
