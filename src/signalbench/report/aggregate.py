"""Aggregate per-framework benchmark results and rank frameworks."""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Set

import pandas as pd

from signalbench.parser import Outcome, parse_markdown_results

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["test", "framework", "time_micros", "passed"]


@dataclass(frozen=True)
class FrameworkStats:
    """Win and pass counts for one framework over a whole run."""

    wins: int = 0
    total: int = 0
    passed: int = 0

    @property
    def pass_rate(self) -> int:
        """Passed outcomes as a whole percentage of recorded outcomes."""
        if self.total == 0:
            return 0
        return math.floor(self.passed * 100 / self.total + 0.5)


@dataclass
class BenchmarkResults:
    """Merged results of one aggregation run.

    ``results`` maps test name -> framework -> Outcome. A framework missing
    from a test's mapping has no data for it, which is not a failure.
    ``frameworks`` is in ranking order.
    """

    results: Dict[str, Dict[str, Outcome]]
    frameworks: List[str]
    stats: Dict[str, FrameworkStats]
    best_times: Dict[str, float] = field(default_factory=dict)

    @property
    def tests(self) -> List[str]:
        return sorted(self.results)

    def best_time(self, test: str) -> Optional[float]:
        """Minimum passed time for a test, or None when nobody passed it."""
        return self.best_times.get(test)

    def is_win(self, test: str, framework: str) -> bool:
        outcome = self.results.get(test, {}).get(framework)
        best = self.best_time(test)
        return outcome is not None and outcome.passed and best is not None and outcome.time_micros == best

    def winners(self, test: str) -> Set[str]:
        return {f for f in self.results.get(test, {}) if self.is_win(test, f)}


def build_results_frame(results: Mapping[str, Mapping[str, Outcome]]) -> pd.DataFrame:
    """Flatten test -> framework -> Outcome into one row per recorded outcome."""
    rows = [
        {
            "test": test,
            "framework": framework,
            "time_micros": outcome.time_micros,
            "passed": outcome.passed,
        }
        for test, per_framework in results.items()
        for framework, outcome in per_framework.items()
    ]
    frame = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    return frame.astype({"time_micros": float, "passed": bool})


def compute_best_times(frame: pd.DataFrame) -> Dict[str, float]:
    """Minimum time among passed outcomes, per test."""
    passed = frame.loc[frame["passed"]]
    return {test: float(t) for test, t in passed.groupby("test")["time_micros"].min().items()}


def compute_stats(
    frame: pd.DataFrame, frameworks: List[str], best_times: Mapping[str, float]
) -> Dict[str, FrameworkStats]:
    """Wins, totals and passes per framework.

    Every passed outcome equal to its test's best time is a win, so ties
    give each tied framework a win.
    """
    frame = frame.copy()
    frame["best"] = frame["test"].map(best_times)
    frame["win"] = frame["passed"] & (frame["time_micros"] == frame["best"])

    counts = (
        frame.groupby("framework")
        .agg(wins=("win", "sum"), total=("test", "count"), passed=("passed", "sum"))
        .reindex(frameworks, fill_value=0)
    )

    return {
        framework: FrameworkStats(
            wins=int(row["wins"]), total=int(row["total"]), passed=int(row["passed"])
        )
        for framework, row in counts.iterrows()
    }


def rank_frameworks(stats: Mapping[str, FrameworkStats]) -> List[str]:
    """Most wins first; equal win counts fall back to the framework id."""
    return sorted(stats, key=lambda f: (-stats[f].wins, f))


def aggregate_results(per_framework: Mapping[str, Mapping[str, Outcome]]) -> BenchmarkResults:
    """Merge one Outcome mapping per framework into ranked BenchmarkResults.

    Args:
        per_framework: framework id -> (test name -> Outcome). Frameworks
            with an empty mapping are kept and rank with zero counts.

    Returns:
        BenchmarkResults with frameworks in ranking order
    """
    results: Dict[str, Dict[str, Outcome]] = {}
    for framework in sorted(per_framework):
        for test, outcome in per_framework[framework].items():
            results.setdefault(test, {})[framework] = outcome

    frame = build_results_frame(results)
    best_times = compute_best_times(frame)
    stats = compute_stats(frame, sorted(per_framework), best_times)

    return BenchmarkResults(
        results={test: results[test] for test in sorted(results)},
        frameworks=rank_frameworks(stats),
        stats=stats,
        best_times=best_times,
    )


def load_framework_results(bench_dir: Path, report_name: str) -> Dict[str, Dict[str, Outcome]]:
    """Parse every per-framework markdown report in ``bench_dir``.

    The file name without extension is the framework id. ``report_name`` is
    the combined report and is never read as an input.
    """
    bench_dir = Path(bench_dir)
    if not bench_dir.is_dir():
        raise FileNotFoundError(f"Bench directory not found: {bench_dir}")

    per_framework: Dict[str, Dict[str, Outcome]] = {}

    for md_file in sorted(bench_dir.glob("*.md")):
        if md_file.name == report_name or not md_file.is_file():
            continue

        try:
            content = md_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {md_file}: {e}")
            continue

        per_framework[md_file.stem] = parse_markdown_results(content, source=md_file.stem)
        logger.info(f"Parsed {len(per_framework[md_file.stem])} results for {md_file.stem}")

    if not per_framework:
        raise ValueError(f"No benchmark results found in {bench_dir}")

    return per_framework
