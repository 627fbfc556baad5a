"""Test version lookup from lock documents and manifests."""

from signalbench.versions import VersionResolver, read_lock_version, read_manifest_version

LOCK_CONTENT = """# Generated by pub
packages:
  alien_signals:
    dependency: "direct main"
    description:
      name: alien_signals
      sha256: "0123abcd"
      url: "https://pub.dev"
    source: hosted
    version: "0.5.1"
  state_beacon_core:
    dependency: "direct main"
    source: hosted
    version: 1.1.0
  no_version:
    dependency: transitive
sdks:
  dart: ">=3.0.0 <4.0.0"
"""


def write_lock(frameworks_dir, framework, content=LOCK_CONTENT):
    lock_dir = frameworks_dir / framework
    lock_dir.mkdir(parents=True)
    (lock_dir / "pubspec.lock").write_text(content)


def test_read_lock_version():
    assert read_lock_version(LOCK_CONTENT, "alien_signals") == "0.5.1"
    assert read_lock_version(LOCK_CONTENT, "state_beacon_core") == "1.1.0"


def test_read_lock_version_stops_at_next_top_level_entry():
    assert read_lock_version(LOCK_CONTENT, "no_version") is None
    assert read_lock_version(LOCK_CONTENT, "unknown") is None


def test_read_manifest_version():
    assert read_manifest_version("name: void_signals\nversion: 2.0.1\n") == "2.0.1"
    assert read_manifest_version("name: void_signals\n") is None
    assert read_manifest_version("version: [unclosed\n") is None


def test_resolver_uses_package_name_overrides(tmp_path):
    write_lock(tmp_path, "state_beacon")
    write_lock(tmp_path, "alien_signals")

    resolver = VersionResolver(tmp_path, package_names={"state_beacon": "state_beacon_core"})

    assert resolver.resolve("state_beacon") == "1.1.0"
    assert resolver.resolve("alien_signals") == "0.5.1"


def test_resolver_missing_sources_are_not_errors(tmp_path):
    resolver = VersionResolver(tmp_path, local_framework="void_signals", local_manifest=tmp_path / "nope.yaml")

    assert resolver.resolve("mobx") is None
    assert resolver.resolve("void_signals") is None
    assert resolver.resolve_all(["mobx", "void_signals"]) == {}


def test_resolver_reads_local_manifest(tmp_path):
    manifest = tmp_path / "pubspec.yaml"
    manifest.write_text("name: void_signals\nversion: 0.9.0\n")
    write_lock(tmp_path / "frameworks", "alien_signals")

    resolver = VersionResolver(
        tmp_path / "frameworks", local_framework="void_signals", local_manifest=manifest
    )

    assert resolver.resolve_all(["alien_signals", "void_signals", "mobx"]) == {
        "alien_signals": "0.5.1",
        "void_signals": "0.9.0",
    }


def test_describe_builds_links(tmp_path):
    resolver = VersionResolver(tmp_path, package_names={"state_beacon": "state_beacon_core"})

    info = resolver.describe("state_beacon", "1.1.0")

    assert info.package_url == "https://pub.dev/packages/state_beacon_core"
    assert info.version_url == "https://pub.dev/packages/state_beacon_core/versions/1.1.0"
    assert info.header_label == (
        "state_beacon ([1.1.0](https://pub.dev/packages/state_beacon_core/versions/1.1.0))"
    )
    assert info.summary_label == (
        "[state_beacon](https://pub.dev/packages/state_beacon_core) "
        "([1.1.0](https://pub.dev/packages/state_beacon_core/versions/1.1.0))"
    )


def test_read_manifest_version_keeps_version_text():
    assert read_manifest_version("name: void_signals\nversion: 1.10\n") == "1.10"
    assert read_manifest_version('name: void_signals\nversion: "2.0.0-dev.1"\n') == "2.0.0-dev.1"


def test_resolver_skips_unreadable_lock_file(tmp_path, caplog):
    lock_dir = tmp_path / "fast"
    lock_dir.mkdir()
    (lock_dir / "pubspec.lock").write_bytes(b"packages:\n  fast:\n    version: \xff\xfe\n")
    write_lock(tmp_path, "alien_signals")

    resolver = VersionResolver(tmp_path)

    assert resolver.resolve_all(["fast", "alien_signals"]) == {"alien_signals": "0.5.1"}
    assert "Failed to read" in caplog.text


def test_resolver_skips_unreadable_local_manifest(tmp_path, caplog):
    manifest = tmp_path / "pubspec.yaml"
    manifest.write_bytes(b"name: void_signals\nversion: \xff\n")

    resolver = VersionResolver(
        tmp_path / "frameworks", local_framework="void_signals", local_manifest=manifest
    )

    assert resolver.resolve("void_signals") is None
    assert "Failed to read" in caplog.text
