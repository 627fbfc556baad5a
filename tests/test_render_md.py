"""Test Markdown rendering of aggregated results."""

from datetime import datetime

import pytest

from signalbench.parser import Outcome, parse_time
from signalbench.report.aggregate import aggregate_results
from signalbench.report.render_md import (
    format_time,
    rank_label,
    render_markdown_report,
    render_results_table,
    render_summary_table,
)
from signalbench.versions import VersionResolver


def test_format_time_bands():
    assert format_time(500) == "500μs"
    assert format_time(999) == "999μs"
    assert format_time(1_000) == "1.00ms"
    assert format_time(12_340) == "12.34ms"
    assert format_time(1_500_000) == "1.50s"


@pytest.mark.parametrize("micros", [0, 500, 12_340, 250_000, 1_500_000, 42_000_000])
def test_format_time_round_trips_through_parser(micros):
    assert parse_time(format_time(micros)) == pytest.approx(micros)


def test_rank_labels():
    assert [rank_label(i) for i in range(5)] == ["🥇", "🥈", "🥉", "4", "5"]


def test_fast_and_slow_tables():
    results = aggregate_results({
        "slow": {"creation": Outcome(1_000, True)},
        "fast": {"creation": Outcome(100, True)},
    })

    assert render_results_table(results).splitlines() == [
        "| Test | fast | slow |",
        "|------|--------|--------|",
        "| creation | **100μs** 🏆 | 1.00ms |",
    ]
    assert render_summary_table(results).splitlines() == [
        "| Rank | Framework | Wins | Pass Rate |",
        "|------|-----------|------|-----------|",
        "| 🥇 | fast | 1 | 100% |",
        "| 🥈 | slow | 0 | 100% |",
    ]


def test_failed_and_missing_cells():
    results = aggregate_results({
        "broken": {"chain": Outcome.failed()},
        "ok": {"chain": Outcome(50, True), "creation": Outcome(10, True)},
    })

    rows = render_results_table(results).splitlines()

    assert rows[0] == "| Test | ok | broken |"
    assert rows[2] == "| chain | **50μs** 🏆 | ❌ |"
    assert rows[3] == "| creation | **10μs** 🏆 | N/A |"
    assert "| 🥈 | broken | 0 | 0% |" in render_summary_table(results)


def test_header_includes_versions(tmp_path):
    results = aggregate_results({"mobx": {"creation": Outcome(10, True)}})
    versions = VersionResolver(tmp_path).describe_all({"mobx": "2.3.0"})

    header = render_results_table(results, versions).splitlines()[0]

    assert header == "| Test | mobx ([2.3.0](https://pub.dev/packages/mobx/versions/2.3.0)) |"


def test_summary_labels_override_framework_names():
    results = aggregate_results({"mobx": {"creation": Outcome(10, True)}})

    table = render_summary_table(results, {"mobx": "[mobx](https://pub.dev/packages/mobx)"})

    assert "| 🥇 | [mobx](https://pub.dev/packages/mobx) | 1 | 100% |" in table


def test_markdown_report_layout():
    results = aggregate_results({"a": {"t1": Outcome(5, True)}, "b": {"t1": Outcome(7, True)}})

    report = render_markdown_report(
        results, title="Reactivity Benchmark Report", generated_at=datetime(2026, 1, 2, 3, 4, 5)
    )
    lines = report.splitlines()

    assert lines[0] == "# Reactivity Benchmark Report"
    assert "Generated: 2026-01-02T03:04:05" in lines
    assert lines.index("## Results") < lines.index("## Summary")
    assert report.endswith("| 🥈 | b | 0 | 100% |\n")
