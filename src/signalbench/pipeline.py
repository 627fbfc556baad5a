"""Batch runs: build the combined report, then sync it into README files."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from signalbench.config import AppConfig
from signalbench.report.aggregate import BenchmarkResults, aggregate_results, load_framework_results
from signalbench.report.render_md import render_markdown_report, summary_labels
from signalbench.report.snapshot import build_snapshot, load_snapshot, save_snapshot
from signalbench.sync import SyncOutcome, sync_targets
from signalbench.versions import VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class ReportArtifacts:
    """Everything one report run produced."""

    results: BenchmarkResults
    versions: Dict[str, str]
    report_path: Path
    snapshot_path: Path

    @property
    def missing_versions(self) -> List[str]:
        return [f for f in self.results.frameworks if f not in self.versions]


def generate_report(config: AppConfig, generated_at: Optional[datetime] = None) -> ReportArtifacts:
    """Parse inputs, aggregate, render, then write the report and snapshot.

    Raises:
        FileNotFoundError: bench directory is missing
        ValueError: no framework reports were found
    """
    generated_at = generated_at or datetime.now()

    per_framework = load_framework_results(config.bench_dir, config.report_name)
    results = aggregate_results(per_framework)

    resolver = VersionResolver.from_config(config)
    versions = resolver.resolve_all(results.frameworks)

    report_md = render_markdown_report(
        results,
        resolver.describe_all(versions),
        title=config.report_title,
        generated_at=generated_at,
    )
    snapshot = build_snapshot(results, versions, generated_at)

    config.report_path.write_text(report_md, encoding="utf-8")
    save_snapshot(snapshot, config.snapshot_path)
    logger.info(f"Wrote {config.report_path} and {config.snapshot_path}")

    return ReportArtifacts(
        results=results,
        versions=versions,
        report_path=config.report_path,
        snapshot_path=config.snapshot_path,
    )


def load_summary_labels(config: AppConfig) -> Dict[str, str]:
    """Linked summary labels built from the snapshot's version map."""
    if not config.snapshot_path.exists():
        logger.warning(f"Snapshot {config.snapshot_path} not found, summary tables get no version links")
        return {}

    try:
        _, versions = load_snapshot(config.snapshot_path)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to load snapshot {config.snapshot_path}: {e}, summary tables get no version links")
        return {}

    resolver = VersionResolver.from_config(config)
    return summary_labels(resolver.describe_all(versions))


def sync_readmes(config: AppConfig) -> List[SyncOutcome]:
    """Copy the combined report's content into every configured target.

    Raises:
        FileNotFoundError: the combined report does not exist
        ValueError: the combined report has no Results section
    """
    if not config.report_path.exists():
        raise FileNotFoundError(f"Report not found: {config.report_path}")

    report = config.report_path.read_text(encoding="utf-8")
    return sync_targets(report, config.sync_targets, load_summary_labels(config))
