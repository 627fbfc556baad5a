"""Structured JSON snapshot of an aggregation run."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from signalbench.parser import Outcome
from signalbench.report.aggregate import BenchmarkResults, FrameworkStats, aggregate_results

logger = logging.getLogger(__name__)


def build_snapshot(
    results: BenchmarkResults,
    versions: Mapping[str, str],
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Machine-readable form of a run: results, summary counts and versions."""
    return {
        "timestamp": (generated_at or datetime.now()).isoformat(),
        "frameworks": list(results.frameworks),
        "versions": dict(versions),
        "results": {
            test: {
                framework: {"time": outcome.time_micros, "passed": outcome.passed}
                for framework, outcome in per_framework.items()
            }
            for test, per_framework in results.results.items()
        },
        "summary": {
            framework: {"wins": s.wins, "total": s.total, "passed": s.passed}
            for framework, s in results.stats.items()
        },
    }


def save_snapshot(snapshot: Mapping[str, Any], output_file: Path):
    """Write a snapshot as indented JSON."""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False)
        f.write("\n")


def snapshot_to_results(snapshot: Mapping[str, Any]) -> Tuple[BenchmarkResults, Dict[str, str]]:
    """Rebuild the aggregated model and version map from a snapshot.

    Summary counts are recomputed from the results rather than trusted.
    """
    per_framework: Dict[str, Dict[str, Outcome]] = {
        framework: {} for framework in snapshot.get("frameworks", [])
    }
    for test, per_test in snapshot.get("results", {}).items():
        for framework, entry in per_test.items():
            per_framework.setdefault(framework, {})[test] = Outcome(
                float(entry.get("time", 0.0)), bool(entry.get("passed", False))
            )

    results = aggregate_results(per_framework)
    if results.stats != _stored_stats(snapshot, results):
        logger.warning("Snapshot summary does not match its results, using recomputed counts")

    versions = {f: str(v) for f, v in snapshot.get("versions", {}).items() if v is not None}
    return results, versions


def _stored_stats(snapshot: Mapping[str, Any], results: BenchmarkResults) -> Dict[str, FrameworkStats]:
    stored = snapshot.get("summary", {})
    counts = {}
    for framework in results.stats:
        entry = stored.get(framework, {})
        counts[framework] = FrameworkStats(
            wins=int(entry.get("wins", 0)),
            total=int(entry.get("total", 0)),
            passed=int(entry.get("passed", 0)),
        )
    return counts


def load_snapshot(snapshot_file: Path) -> Tuple[BenchmarkResults, Dict[str, str]]:
    """Read a snapshot written by save_snapshot."""
    with open(snapshot_file, encoding="utf-8") as f:
        return snapshot_to_results(json.load(f))
