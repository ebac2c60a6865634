"""
Release classifier.

Decides which release assets are packages and turns each one into a
PackageRecord. Families and their patterns are tried in configuration
order and the first match wins.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from release_db.config import DEFAULT_VARIANT, PackageFamily, RepoSettings
from release_db.errors import MalformedVersionError, UpstreamFetchError

logger = logging.getLogger(__name__)

VERSION_RE = re.compile(r"^\d+\.\d+\.\d+\S*$")


@dataclass
class PackageRecord:
    """A package derived from one release asset."""
    base_name: str
    variant: str
    version: str
    architecture: str
    filename: str
    size: int
    download_url: str
    published_at: datetime
    release_tag: str
    family: PackageFamily

    @property
    def is_default(self) -> bool:
        return self.variant == DEFAULT_VARIANT

    @property
    def provides(self) -> str:
        """PROVIDES value: the family name pinned to this version."""
        if self.is_default:
            return ""
        return f"{self.family.base}={self.version}"

    @property
    def dirname(self) -> str:
        return f"{self.base_name}-{self.version}-{self.architecture}"

    @property
    def install_version(self) -> str:
        """Version as used in install paths (separator translated to dots)."""
        return self.version.replace(self.family.version_separator, ".")

    @property
    def builddate(self) -> int:
        return int(self.published_at.timestamp())


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware datetime."""
    if not isinstance(value, str):
        raise UpstreamFetchError(f"Release timestamp is not a string: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise UpstreamFetchError(f"Malformed release timestamp {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_version(version: str) -> str:
    """Return the version unchanged, or raise if it is not N.N.N<suffix>."""
    if not VERSION_RE.match(version):
        raise MalformedVersionError(f"Unparseable version {version!r}")
    return version


def has_allowed_arch(name: str, settings: RepoSettings) -> bool:
    """Check the trailing <arch><extension> segment against the allow-list."""
    return any(
        name.endswith(f"{arch}{settings.extension}")
        for arch in settings.architectures
    )


def match_asset(name: str, settings: RepoSettings) -> Optional[tuple[PackageFamily, dict]]:
    """Find the first family pattern matching an asset name."""
    for family in settings.families:
        for pattern in family.patterns:
            match = pattern.compiled.match(name)
            if not match:
                continue
            groups = match.groupdict()
            variant = groups.get("variant") or pattern.variant
            return family, {
                "variant": variant,
                "version": groups["version"],
                "arch": groups["arch"],
            }
    return None


def classify(assets: list[dict], release: dict, settings: RepoSettings) -> list[PackageRecord]:
    """Classify the assets of one release, in asset order."""
    records = []
    published_at = parse_timestamp(release["published_at"])

    for asset in assets:
        name = asset.get("name", "")
        if not has_allowed_arch(name, settings):
            continue

        found = match_asset(name, settings)
        if found is None:
            continue
        family, fields = found

        if fields["arch"] not in settings.architectures:
            continue

        try:
            version = check_version(fields["version"])
        except MalformedVersionError as e:
            logger.debug("Skipping %s: %s", name, e)
            continue

        variant = fields["variant"]
        base_name = family.base if variant == DEFAULT_VARIANT else f"{family.base}-{variant}"

        records.append(PackageRecord(
            base_name=base_name,
            variant=variant,
            version=version,
            architecture=fields["arch"],
            filename=name,
            size=asset.get("size", 0),
            download_url=asset.get("browser_download_url", ""),
            published_at=published_at,
            release_tag=release.get("tag_name", ""),
            family=family,
        ))

    return records


def collect_packages(releases: list[dict], settings: RepoSettings) -> list[PackageRecord]:
    """Collect every valid package of every published release."""
    packages = []
    for release in releases:
        if release.get("draft"):
            continue
        if not release.get("published_at"):
            logger.debug("Skipping unpublished release %s", release.get("tag_name"))
            continue
        packages.extend(classify(release.get("assets") or [], release, settings))
    return packages


def select_latest(packages: list[PackageRecord], max_packages: int) -> list[PackageRecord]:
    """Newest packages first, keeping at most max_packages.

    The sort is stable so packages published at the same time keep their
    enumeration order.
    """
    ordered = sorted(packages, key=lambda pkg: pkg.published_at, reverse=True)
    return ordered[:max_packages]
