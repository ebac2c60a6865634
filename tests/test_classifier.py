"""Tests for release asset classification and package selection."""

from datetime import datetime, timezone

import pytest

from release_db.classifier import (
    check_version,
    classify,
    collect_packages,
    parse_timestamp,
    select_latest,
)
from release_db.config import parse_config
from release_db.errors import MalformedVersionError, UpstreamFetchError
from tests.conftest import CONFIG, make_asset, make_release


def loose_settings(patterns, architectures=("x86_64",)):
    """Settings for a 'tool' family with the given patterns."""
    return parse_config({
        "settings": {
            "owner": "o",
            "repo": "r",
            "architectures": list(architectures),
        },
        "packages": [{"base": "tool", "patterns": patterns}],
    })


class TestClassify:
    def test_variant_asset(self, settings):
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        assets = [make_asset("linux-upstream-zen-6.6.1_liquid-2-x86_64.pkg.tar.zst", size=99)]

        [pkg] = classify(assets, release, settings)

        assert pkg.base_name == "linux-upstream-zen"
        assert pkg.variant == "zen"
        assert pkg.version == "6.6.1_liquid-2"
        assert pkg.architecture == "x86_64"
        assert pkg.size == 99
        assert pkg.release_tag == "t"
        assert pkg.download_url.endswith(pkg.filename)
        assert pkg.dirname == "linux-upstream-zen-6.6.1_liquid-2-x86_64"

    def test_default_asset(self, settings):
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        [pkg] = classify([make_asset("linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst")], release, settings)
        assert pkg.base_name == "linux-upstream"
        assert pkg.variant == "default"
        assert pkg.is_default
        assert pkg.provides == ""

    def test_unmatched_assets_are_skipped(self, settings):
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        assets = [
            make_asset("foo-1.0.pkg.tar.zst"),
            make_asset("linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst.sig"),
            make_asset("linux-upstream-6.6.1_liquid-2-aarch64.pkg.tar.zst"),
            make_asset("linux-upstream-bore-6.6.1_liquid-2-x86_64.pkg.tar.zst"),
        ]
        assert classify(assets, release, settings) == []

    def test_keeps_asset_order(self, settings):
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        assets = [
            make_asset("linux-upstream-rt-6.6.1_liquid-2-x86_64.pkg.tar.zst"),
            make_asset("linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst"),
            make_asset("linux-upstream-lts-6.6.1_liquid-2-x86_64.pkg.tar.zst"),
        ]
        names = [pkg.base_name for pkg in classify(assets, release, settings)]
        assert names == ["linux-upstream-rt", "linux-upstream", "linux-upstream-lts"]

    def test_malformed_version_skips_only_that_asset(self):
        settings = loose_settings([r"^tool-(?P<version>[^-]+)-(?P<arch>x86_64)\.pkg\.tar\.zst$"])
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        assets = [
            make_asset("tool-nightly-x86_64.pkg.tar.zst"),
            make_asset("tool-1.2.3-x86_64.pkg.tar.zst"),
        ]
        [pkg] = classify(assets, release, settings)
        assert pkg.version == "1.2.3"

    def test_first_matching_pattern_wins(self):
        settings = loose_settings([
            {"regex": r"^tool-(?P<version>[\d.]+)-(?P<arch>x86_64)\.pkg\.tar\.zst$", "variant": "first"},
            {"regex": r"^tool-(?P<version>.+)-(?P<arch>x86_64)\.pkg\.tar\.zst$", "variant": "second"},
        ])
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        [pkg] = classify([make_asset("tool-1.2.3-x86_64.pkg.tar.zst")], release, settings)
        assert pkg.variant == "first"
        assert pkg.base_name == "tool-first"

    def test_captured_arch_must_be_allowed(self):
        settings = loose_settings(
            [r"^tool-(?P<version>[\d.]+)-(?P<arch>\w+)-x86_64\.pkg\.tar\.zst$"],
        )
        release = make_release("t", "2024-02-01T00:00:00Z", [])
        assets = [make_asset("tool-1.2.3-aarch64-x86_64.pkg.tar.zst")]
        assert classify(assets, release, settings) == []


class TestCollectPackages:
    def test_skips_drafts(self, settings, releases):
        packages = collect_packages(releases, settings)
        assert all(pkg.version != "7.0.0_liquid-1" for pkg in packages)
        assert len(packages) == 4

    def test_enumeration_order(self, settings, releases):
        packages = collect_packages(releases, settings)
        assert [pkg.filename for pkg in packages] == [
            "linux-upstream-zen-6.6.1_liquid-2-x86_64.pkg.tar.zst",
            "linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst",
            "linux-upstream-6.5.0_liquid-1-x86_64.pkg.tar.zst",
            "linux-upstream-rt-6.4.0_liquid-1-x86_64.pkg.tar.zst",
        ]

    def test_missing_assets_key(self, settings):
        assert collect_packages([{"tag_name": "x", "published_at": "2024-01-01T00:00:00Z"}], settings) == []


class TestSelectLatest:
    def test_newest_first(self, settings):
        releases = [
            make_release("jan", "2024-01-01T00:00:00Z", ["linux-upstream-6.5.0_liquid-1-x86_64.pkg.tar.zst"]),
            make_release("feb", "2024-02-01T00:00:00Z", ["linux-upstream-6.6.0_liquid-1-x86_64.pkg.tar.zst"]),
        ]
        latest = select_latest(collect_packages(releases, settings), 3)
        assert [pkg.release_tag for pkg in latest] == ["feb", "jan"]

    def test_truncates(self, settings, releases):
        latest = select_latest(collect_packages(releases, settings), 3)
        assert len(latest) == 3
        assert latest[-1].version == "6.5.0_liquid-1"

    def test_ties_keep_enumeration_order(self, settings, releases):
        latest = select_latest(collect_packages(releases, settings), 2)
        assert [pkg.variant for pkg in latest] == ["zen", "default"]


class TestHelpers:
    @pytest.mark.parametrize("version", ["6.6.1_liquid-2", "1.2.3", "10.0.0-rc1"])
    def test_valid_versions(self, version):
        assert check_version(version) == version

    @pytest.mark.parametrize("version", ["nightly", "1.2", "v1.2.3", ""])
    def test_malformed_versions(self, version):
        with pytest.raises(MalformedVersionError):
            check_version(version)

    def test_parse_timestamp_is_utc(self):
        assert parse_timestamp("2024-02-01T10:00:00Z") == datetime(2024, 2, 1, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["not-a-date", 1706745600, ""])
    def test_parse_timestamp_rejects_malformed_values(self, value):
        with pytest.raises(UpstreamFetchError):
            parse_timestamp(value)

    def test_builddate_is_epoch_seconds(self, settings):
        release = make_release("t", "2024-01-01T00:00:00Z", [])
        [pkg] = classify([make_asset("linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst")], release, settings)
        assert pkg.builddate == 1704067200
