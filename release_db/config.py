"""
Repository configuration.

Loads repo.yaml into dataclasses. The file describes the upstream GitHub
repository, the repository identity and one or more package families, each
with its ordered filename patterns and constant metadata.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from release_db.errors import ConfigError


DEFAULT_CONFIG_FILE = "repo.yaml"
DEFAULT_VARIANT = "default"

# Named groups every classification pattern must define
REQUIRED_GROUPS = ("version", "arch")


@dataclass
class VariantPattern:
    """One filename pattern of a package family.

    The regex must define the named groups ``version`` and ``arch``. The
    variant comes from a ``variant`` group when present, otherwise from the
    fixed ``variant`` value.
    """
    regex: str
    variant: str = DEFAULT_VARIANT

    def __post_init__(self):
        try:
            self.compiled = re.compile(self.regex)
        except re.error as e:
            raise ConfigError(f"Invalid pattern {self.regex!r}: {e}") from e

        missing = [g for g in REQUIRED_GROUPS if g not in self.compiled.groupindex]
        if missing:
            raise ConfigError(
                f"Pattern {self.regex!r} lacks named group(s): {', '.join(missing)}"
            )


@dataclass
class PackageFamily:
    """A logical package and the build variants published for it."""
    base: str
    patterns: list[VariantPattern] = field(default_factory=list)
    description: str = ""
    license: str = "GPL2"
    groups: list[str] = field(default_factory=list)
    depends: list[str] = field(default_factory=list)
    optdepends: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    replaces: list[str] = field(default_factory=list)
    db_depends: list[str] = field(default_factory=list)
    version_separator: str = "_"
    install_paths: list[str] = field(default_factory=list)
    default_install_paths: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.description:
            self.description = f"{self.base} from GitHub"


@dataclass
class RepoSettings:
    """Repository settings from repo.yaml."""
    name: str = "custom"
    owner: str = ""
    repo: str = ""
    max_packages: int = 3
    architectures: list[str] = field(default_factory=lambda: ["x86_64"])
    extension: str = ".pkg.tar.zst"
    packager: str = "Unknown Packager <unknown@example.com>"
    reproducible: bool = False
    api_url: str = "https://api.github.com"
    per_page: int = 30
    families: list[PackageFamily] = field(default_factory=list)
    token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if self.max_packages < 1:
            raise ConfigError(f"max_packages must be positive, got {self.max_packages}")

    @property
    def upstream_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    @property
    def metadata_files(self) -> list[str]:
        """Names of the resources the repository serves."""
        return [
            f"{self.name}.db",
            f"{self.name}.db.sig",
            f"{self.name}.files",
            f"{self.name}.files.sig",
        ]


def _load_family(data: dict) -> PackageFamily:
    if "base" not in data:
        raise ConfigError("Package family without 'base' name")

    patterns = []
    for pat in data.get("patterns", []):
        if isinstance(pat, str):
            patterns.append(VariantPattern(regex=pat))
        else:
            patterns.append(VariantPattern(
                regex=pat["regex"],
                variant=pat.get("variant", DEFAULT_VARIANT),
            ))
    if not patterns:
        raise ConfigError(f"Package family {data['base']!r} has no patterns")

    return PackageFamily(
        base=data["base"],
        patterns=patterns,
        description=data.get("description", ""),
        license=data.get("license", "GPL2"),
        groups=data.get("groups", []),
        depends=data.get("depends", []),
        optdepends=data.get("optdepends", []),
        conflicts=data.get("conflicts", []),
        replaces=data.get("replaces", []),
        db_depends=data.get("db_depends", []),
        version_separator=data.get("version_separator", "_"),
        install_paths=data.get("install_paths", []),
        default_install_paths=data.get("default_install_paths", []),
    )


def parse_config(data: dict, token: Optional[str] = None) -> RepoSettings:
    """Build settings from an already parsed configuration mapping."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    settings_data = data.get("settings", {})
    for key in ("owner", "repo"):
        if not settings_data.get(key):
            raise ConfigError(f"settings.{key} is required")

    families = [_load_family(fam) for fam in data.get("packages", [])]
    if not families:
        raise ConfigError("At least one package family is required")

    return RepoSettings(
        name=settings_data.get("name", "custom"),
        owner=settings_data["owner"],
        repo=settings_data["repo"],
        max_packages=settings_data.get("max_packages", 3),
        architectures=settings_data.get("architectures", ["x86_64"]),
        extension=settings_data.get("extension", ".pkg.tar.zst"),
        packager=settings_data.get("packager", "Unknown Packager <unknown@example.com>"),
        reproducible=settings_data.get("reproducible", False),
        api_url=settings_data.get("api_url", "https://api.github.com"),
        per_page=settings_data.get("per_page", 30),
        families=families,
        token=token,
    )


def load_config(config_path: Path, token: Optional[str] = None) -> RepoSettings:
    """Load configuration from repo.yaml.

    The GitHub token never lives in the file; it falls back to the
    GITHUB_TOKEN environment variable.
    """
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    return parse_config(data or {}, token=token or os.environ.get("GITHUB_TOKEN"))
