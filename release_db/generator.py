"""
Repository generator.

Turns the upstream release listing into the compressed <name>.db and
<name>.files containers. Nothing is cached: every call to generate() fetches
the releases once and rebuilds both containers from scratch.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Optional, Protocol

from release_db.archive import ArchiveEntry, build_archive, compress
from release_db.classifier import PackageRecord, collect_packages, select_latest
from release_db.config import RepoSettings
from release_db.formatter import format_depends, format_description, format_file_list
from release_db.github import GitHubAPI

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 512


class ReleaseSource(Protocol):
    def get_releases(self, owner: str, repo: str, per_page: int = 30) -> list[dict]:
        ...


@dataclass(frozen=True)
class PlaceholderSignature:
    """Random bytes served where a detached signature is expected.

    This is NOT a signature over anything and cannot be verified. It only
    exists so clients that insist on fetching a .sig resource find one.
    """
    data: bytes
    verifying: bool = False


def make_signature() -> PlaceholderSignature:
    """Fresh, non-verifying 512 byte signature stand-in."""
    return PlaceholderSignature(secrets.token_bytes(SIGNATURE_SIZE))


@dataclass
class Repository:
    """Output of one generation pass."""
    db: bytes
    files: bytes
    packages: list[PackageRecord] = field(default_factory=list)
    all_packages: list[PackageRecord] = field(default_factory=list)


def _entry_mtime(pkg: PackageRecord, settings: RepoSettings) -> Optional[int]:
    return pkg.builddate if settings.reproducible else None


def db_entries(packages: list[PackageRecord], settings: RepoSettings) -> list[ArchiveEntry]:
    """desc and depends members for each package, in package order."""
    entries = []
    for pkg in packages:
        mtime = _entry_mtime(pkg, settings)
        entries.append(ArchiveEntry(
            f"{pkg.dirname}/desc", format_description(pkg, settings), mtime
        ))
        if pkg.family.db_depends:
            entries.append(ArchiveEntry(f"{pkg.dirname}/depends", format_depends(pkg), mtime))
    return entries


def files_entries(packages: list[PackageRecord], settings: RepoSettings) -> list[ArchiveEntry]:
    """files member for each package, in package order."""
    return [
        ArchiveEntry(f"{pkg.dirname}/files", format_file_list(pkg), _entry_mtime(pkg, settings))
        for pkg in packages
    ]


class RepositoryGenerator:
    """Builds the repository database for one configured upstream."""

    def __init__(self, settings: RepoSettings, source: Optional[ReleaseSource] = None):
        self.settings = settings
        self.source = source or GitHubAPI(token=settings.token, base_url=settings.api_url)

    def fetch_releases(self) -> list[dict]:
        return self.source.get_releases(
            self.settings.owner, self.settings.repo, per_page=self.settings.per_page
        )

    def collect(self) -> list[PackageRecord]:
        """Every valid package across all published releases."""
        return collect_packages(self.fetch_releases(), self.settings)

    def list_packages(self) -> list[str]:
        """Filenames of all valid packages, not only the retained ones."""
        return [pkg.filename for pkg in self.collect()]

    def build(self, all_packages: list[PackageRecord]) -> Repository:
        """Build both containers from already classified packages."""
        packages = select_latest(all_packages, self.settings.max_packages)

        db_tar = build_archive(db_entries(packages, self.settings))
        files_tar = build_archive(files_entries(packages, self.settings))

        return Repository(
            db=compress(db_tar, self.settings.reproducible),
            files=compress(files_tar, self.settings.reproducible),
            packages=packages,
            all_packages=all_packages,
        )

    def generate(self) -> Repository:
        """Fetch releases and build the repository."""
        all_packages = self.collect()
        repository = self.build(all_packages)
        logger.info(
            "Generated %s: %d of %d package(s)",
            self.settings.name, len(repository.packages), len(all_packages),
        )
        return repository
