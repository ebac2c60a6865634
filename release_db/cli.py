"""
release-db command line tool.

Writes <name>.db, <name>.files and their signature stand-ins into an output
directory, lists packages, or serves the repository over HTTP.
"""

import argparse
from pathlib import Path

from release_db.config import DEFAULT_CONFIG_FILE, RepoSettings, load_config
from release_db.errors import ReleaseDbError
from release_db.generator import RepositoryGenerator, make_signature
from release_db.logging_utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a pacman repository database from GitHub releases"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help="Path to repo.yaml config file",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("repo"),
        help="Output directory for repository",
    )
    parser.add_argument(
        "--list", "-l",
        action="store_true",
        help="List configured package families and exit",
    )
    parser.add_argument(
        "--list-packages",
        action="store_true",
        help="Print every valid package filename upstream and exit",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the repository over HTTP instead of writing files",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Address to bind with --serve")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind with --serve")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def write_repository(generator: RepositoryGenerator, output_dir: Path) -> list[Path]:
    """Generate the repository and write its four resources."""
    repository = generator.generate()
    name = generator.settings.name

    output_dir.mkdir(parents=True, exist_ok=True)
    contents = {
        f"{name}.db": repository.db,
        f"{name}.db.sig": make_signature().data,
        f"{name}.files": repository.files,
        f"{name}.files.sig": make_signature().data,
    }

    written = []
    for filename, data in contents.items():
        path = output_dir / filename
        path.write_bytes(data)
        written.append(path)

    for pkg in repository.packages:
        print(f"  - {pkg.filename} ({pkg.release_tag})")
    return written


def serve(settings: RepoSettings, host: str, port: int) -> None:
    import uvicorn

    from release_db.web import create_app

    uvicorn.run(create_app(settings), host=host, port=port)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        settings = load_config(args.config)
    except ReleaseDbError as e:
        print(f"Error: {e}")
        return 1

    if args.list:
        print("Configured package families:")
        for family in settings.families:
            variants = ", ".join(
                "(captured)" if "variant" in p.compiled.groupindex else p.variant
                for p in family.patterns
            )
            print(f"  - {family.base} (patterns: {len(family.patterns)}, variants: {variants})")
        return 0

    if args.serve:
        serve(settings, args.host, args.port)
        return 0

    generator = RepositoryGenerator(settings)
    try:
        if args.list_packages:
            for filename in generator.list_packages():
                print(filename)
            return 0

        print(f"Generating {settings.name} from {settings.owner}/{settings.repo}...")
        written = write_repository(generator, args.output)
    except ReleaseDbError as e:
        print(f"Error: {e}")
        return 1

    for path in written:
        print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
