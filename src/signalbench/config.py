"""Configuration management for signalbench."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()

# Root directories
PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_DIR = PROJECT_ROOT / "configs"

SYNC_MODES = ("results", "summary")

# Framework id -> package name, for frameworks published under another name
DEFAULT_PACKAGE_NAMES = {
    "state_beacon": "state_beacon_core",
}


@dataclass
class SyncTarget:
    """A downstream document kept in sync with the combined report."""

    path: Path
    mode: str = "summary"

    def __post_init__(self):
        self.path = Path(self.path)
        if self.mode not in SYNC_MODES:
            raise ValueError(
                f"sync target mode must be 'results' or 'summary', got {self.mode}"
            )


def _default_sync_targets() -> List[SyncTarget]:
    return [
        SyncTarget(Path("README.md"), "results"),
        SyncTarget(Path("../README.md"), "summary"),
        SyncTarget(Path("../README_CN.md"), "summary"),
    ]


def _optional_env_path(name: str, default: str) -> Optional[Path]:
    value = os.getenv(name, default)
    return Path(value) if value else None


@dataclass
class AppConfig:
    """Application configuration with environment-based defaults."""

    bench_dir: Path = field(default_factory=lambda: Path(os.getenv("SIGNALBENCH_BENCH_DIR", "bench")))
    report_name: str = "BENCHMARK_REPORT.md"
    snapshot_name: str = "benchmark_results.json"
    report_title: str = "Reactivity Benchmark Report"

    frameworks_dir: Path = field(
        default_factory=lambda: Path(os.getenv("SIGNALBENCH_FRAMEWORKS_DIR", "frameworks"))
    )
    local_framework: Optional[str] = field(
        default_factory=lambda: os.getenv("SIGNALBENCH_LOCAL_FRAMEWORK", "void_signals") or None
    )
    local_manifest: Optional[Path] = field(
        default_factory=lambda: _optional_env_path(
            "SIGNALBENCH_LOCAL_MANIFEST", "../packages/void_signals/pubspec.yaml"
        )
    )

    package_names: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PACKAGE_NAMES))
    package_url: str = "https://pub.dev/packages/{package}"
    version_url: str = "https://pub.dev/packages/{package}/versions/{version}"

    sync_targets: List[SyncTarget] = field(default_factory=_default_sync_targets)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.bench_dir = Path(self.bench_dir)
        self.frameworks_dir = Path(self.frameworks_dir)
        if self.local_manifest is not None:
            self.local_manifest = Path(self.local_manifest)
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not self.report_name.endswith(".md"):
            raise ValueError(f"report_name must be a markdown file, got {self.report_name}")

        if self.report_name == self.snapshot_name:
            raise ValueError("report_name and snapshot_name must differ")

        for template in (self.package_url, self.version_url):
            if "{package}" not in template:
                raise ValueError(f"link template must contain '{{package}}': {template}")

        if "{version}" not in self.version_url:
            raise ValueError(f"version_url must contain '{{version}}': {self.version_url}")

        for target in self.sync_targets:
            if not isinstance(target, SyncTarget):
                raise ValueError(f"sync_targets must hold SyncTarget entries, got {target!r}")

    @property
    def report_path(self) -> Path:
        return self.bench_dir / self.report_name

    @property
    def snapshot_path(self) -> Path:
        return self.bench_dir / self.snapshot_name


def load_config_from_yaml(config_path: Path) -> AppConfig:
    """Build an AppConfig from a YAML file.

    Keys not present in the file keep their defaults. Environment variables
    still apply to fields the file does not set.
    """
    with open(config_path) as f:
        data: Dict[str, Any] = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    kwargs: Dict[str, Any] = {}

    paths = data.get("paths") or {}
    for key in ("bench_dir", "frameworks_dir", "local_manifest"):
        if key in paths:
            kwargs[key] = Path(paths[key]) if paths[key] else None
    for key in ("report_name", "snapshot_name"):
        if key in paths:
            kwargs[key] = paths[key]

    if "report_title" in data:
        kwargs["report_title"] = data["report_title"]
    if "local_framework" in data:
        kwargs["local_framework"] = data["local_framework"] or None

    packages = data.get("packages") or {}
    if "names" in packages:
        kwargs["package_names"] = dict(DEFAULT_PACKAGE_NAMES, **(packages["names"] or {}))
    if "package_url" in packages:
        kwargs["package_url"] = packages["package_url"]
    if "version_url" in packages:
        kwargs["version_url"] = packages["version_url"]

    sync_config = data.get("sync") or {}
    if "targets" in sync_config:
        kwargs["sync_targets"] = [
            SyncTarget(Path(t["path"]), t.get("mode", "summary"))
            for t in sync_config["targets"] or []
        ]

    return AppConfig(**kwargs)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load configuration, falling back to configs/base.yaml, then to defaults."""
    if config_path is not None:
        return load_config_from_yaml(Path(config_path))

    base_yaml = CONFIG_DIR / "base.yaml"
    if base_yaml.exists():
        return load_config_from_yaml(base_yaml)

    return AppConfig()
