"""Resolve display versions for benchmarked frameworks."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

_LOCK_VERSION_LINE = re.compile(r'^\s+version:\s*"?([^"]+)"?\s*$')


@dataclass(frozen=True)
class FrameworkVersion:
    """A resolved version with the links rendered next to it."""

    framework: str
    package: str
    version: str
    package_url: str
    version_url: str

    @property
    def header_label(self) -> str:
        """Column header used in the combined results table."""
        return f"{self.framework} ([{self.version}]({self.version_url}))"

    @property
    def summary_label(self) -> str:
        """Framework cell used in summary tables synced into other documents."""
        return f"[{self.framework}]({self.package_url}) ([{self.version}]({self.version_url}))"


def read_lock_version(content: str, package_name: str) -> Optional[str]:
    """Find the version of ``package_name`` in a pubspec.lock style document.

    A package block starts with ``<name>:`` and its first indented
    ``version:`` line is used. The scan stops when another top-level entry
    starts before a version was found.
    """
    in_target = False

    for line in content.splitlines():
        if line.strip() == f"{package_name}:":
            in_target = True
            continue

        if not in_target:
            continue

        match = _LOCK_VERSION_LINE.match(line)
        if match:
            return match.group(1).strip()

        if line and not line.startswith((" ", "\t")):
            break

    return None


def read_manifest_version(content: str) -> Optional[str]:
    """Read the top-level ``version`` field of a pubspec.yaml manifest.

    Scalars are kept as strings, so ``1.10`` is not read as the float 1.1.
    """
    try:
        manifest = yaml.load(content, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse manifest: {e}")
        return None

    version = manifest.get("version") if isinstance(manifest, dict) else None
    if not isinstance(version, str):
        return None
    return version.strip() or None


def _read_source(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read {path}: {e}, version unknown")
        return None


@dataclass
class VersionResolver:
    """Look up framework versions from lock documents and a local manifest.

    Missing files and missing entries resolve to no version, never an error.
    """

    frameworks_dir: Path
    package_names: Mapping[str, str] = field(default_factory=dict)
    local_framework: Optional[str] = None
    local_manifest: Optional[Path] = None
    package_url_template: str = "https://pub.dev/packages/{package}"
    version_url_template: str = "https://pub.dev/packages/{package}/versions/{version}"

    @classmethod
    def from_config(cls, config) -> "VersionResolver":
        return cls(
            frameworks_dir=config.frameworks_dir,
            package_names=config.package_names,
            local_framework=config.local_framework,
            local_manifest=config.local_manifest,
            package_url_template=config.package_url,
            version_url_template=config.version_url,
        )

    def package_name(self, framework: str) -> str:
        return self.package_names.get(framework, framework)

    def lock_file(self, framework: str) -> Path:
        return Path(self.frameworks_dir) / framework / "pubspec.lock"

    def resolve(self, framework: str) -> Optional[str]:
        """Return the version string for one framework, if known."""
        lock_file = self.lock_file(framework)

        if not lock_file.exists():
            if framework == self.local_framework and self.local_manifest is not None:
                return self._resolve_local()
            logger.warning(f"No lock file for {framework} at {lock_file}, version unknown")
            return None

        content = _read_source(lock_file)
        if content is None:
            return None

        version = read_lock_version(content, self.package_name(framework))
        if version is None:
            logger.warning(f"No version entry for {self.package_name(framework)} in {lock_file}")
        return version

    def _resolve_local(self) -> Optional[str]:
        manifest = Path(self.local_manifest)
        if not manifest.exists():
            logger.warning(f"Local manifest not found: {manifest}")
            return None
        content = _read_source(manifest)
        if content is None:
            return None
        return read_manifest_version(content)

    def resolve_all(self, frameworks: Iterable[str]) -> Dict[str, str]:
        """Version map holding only the frameworks whose version was found."""
        versions = {}
        for framework in frameworks:
            version = self.resolve(framework)
            if version is not None:
                versions[framework] = version
        return versions

    def describe(self, framework: str, version: str) -> FrameworkVersion:
        package = self.package_name(framework)
        return FrameworkVersion(
            framework=framework,
            package=package,
            version=version,
            package_url=self.package_url_template.format(package=package),
            version_url=self.version_url_template.format(package=package, version=version),
        )

    def describe_all(self, versions: Mapping[str, str]) -> Dict[str, FrameworkVersion]:
        return {f: self.describe(f, v) for f, v in versions.items()}
