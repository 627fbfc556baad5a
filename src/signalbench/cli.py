"""CLI for signalbench."""

import argparse
import logging
import sys
from pathlib import Path

from signalbench.config import load_config
from signalbench.pipeline import generate_report, sync_readmes

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _load_config(args):
    config = load_config(args.config)
    if getattr(args, "bench_dir", None) is not None:
        config.bench_dir = args.bench_dir
    return config


def cmd_report(args):
    """Generate the combined benchmark report."""
    config = _load_config(args)
    artifacts = generate_report(config)

    print(f"✓ Report generated: {artifacts.report_path}")
    print(f"  - Frameworks: {len(artifacts.results.frameworks)}")
    print(f"  - Tests: {len(artifacts.results.tests)}")
    print(f"  - Snapshot: {artifacts.snapshot_path}")
    if artifacts.missing_versions:
        print(f"  - No version found for: {', '.join(artifacts.missing_versions)}")


def cmd_sync(args):
    """Sync README files from the combined report."""
    config = _load_config(args)
    outcomes = sync_readmes(config)

    for outcome in outcomes:
        if outcome.skipped:
            print(f"  - Skipped {outcome.path} ({outcome.status})")
        else:
            print(f"✓ {outcome.path} updated with latest benchmark results")


def cmd_all(args):
    """Generate the report, then sync README files."""
    cmd_report(args)
    cmd_sync(args)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="signalbench: combine per-framework benchmark reports and sync README files"
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config file (default: configs/base.yaml)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # report
    parser_report = subparsers.add_parser("report", help="Generate combined benchmark report")
    parser_report.add_argument("--bench-dir", type=Path, default=None, help="Directory of per-framework reports")
    parser_report.set_defaults(func=cmd_report)

    # sync
    parser_sync = subparsers.add_parser("sync", help="Sync README files from the combined report")
    parser_sync.add_argument("--bench-dir", type=Path, default=None, help="Directory holding the combined report")
    parser_sync.set_defaults(func=cmd_sync)

    # all
    parser_all = subparsers.add_parser("all", help="Generate report, then sync README files")
    parser_all.add_argument("--bench-dir", type=Path, default=None, help="Directory of per-framework reports")
    parser_all.set_defaults(func=cmd_all)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
