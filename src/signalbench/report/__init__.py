"""Benchmark result aggregation and reporting."""

from .aggregate import BenchmarkResults, FrameworkStats, aggregate_results, load_framework_results
from .render_md import format_time, render_markdown_report, render_summary_table
from .snapshot import build_snapshot, load_snapshot, save_snapshot

__all__ = [
    "BenchmarkResults",
    "FrameworkStats",
    "aggregate_results",
    "load_framework_results",
    "format_time",
    "render_markdown_report",
    "render_summary_table",
    "build_snapshot",
    "load_snapshot",
    "save_snapshot",
]
