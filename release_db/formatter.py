"""Generate the desc, files and depends members of the pacman database."""

from release_db.classifier import PackageRecord
from release_db.config import RepoSettings

ENCODING = "utf-8"


def _lines(values: list[str]) -> str:
    return "\n".join(values)


def format_description(pkg: PackageRecord, settings: RepoSettings) -> bytes:
    """Generate desc content.

    Tag order is what pacman and repo-add consumers expect; do not reorder.
    """
    family = pkg.family
    fields = [
        ("FILENAME", pkg.filename),
        ("NAME", pkg.base_name),
        ("BASE", pkg.base_name),
        ("VERSION", pkg.version),
        ("DESC", family.description),
        ("GROUPS", _lines(family.groups)),
        ("URL", settings.upstream_url),
        ("LICENSE", family.license),
        ("ARCH", pkg.architecture),
        ("PROVIDES", pkg.provides),
        ("DEPENDS", _lines(family.depends)),
        ("OPTDEPENDS", _lines(family.optdepends)),
        ("CONFLICTS", _lines(family.conflicts)),
        ("REPLACES", _lines(family.replaces)),
        ("BUILDDATE", str(pkg.builddate)),
        ("PACKAGER", settings.packager),
        ("SIZE", str(pkg.size)),
    ]

    lines = []
    for tag, value in fields:
        lines.append(f"%{tag}%")
        lines.append(value)
    lines.append("")
    return "\n".join(lines).encode(ENCODING)


def format_file_list(pkg: PackageRecord) -> bytes:
    """Generate files content: the payload marker, then install paths."""
    paths = list(pkg.family.install_paths)
    if pkg.is_default:
        paths.extend(pkg.family.default_install_paths)

    version = pkg.install_version
    lines = [f".{pkg.filename}"] + [path.format(version=version) for path in paths]
    return ("\n".join(lines) + "\n").encode(ENCODING)


def format_depends(pkg: PackageRecord) -> bytes:
    """Generate depends content from the family's db_depends list."""
    return ("\n".join(pkg.family.db_depends + [""])).encode(ENCODING)
