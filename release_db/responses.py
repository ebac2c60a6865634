"""Map a requested repository resource to bytes and HTTP framing."""

import logging
from dataclasses import dataclass, field

from release_db.errors import ReleaseDbError
from release_db.generator import RepositoryGenerator, make_signature

logger = logging.getLogger(__name__)

DB_CACHE_CONTROL = "public, max-age=300"
SIG_CACHE_CONTROL = "public, max-age=31536000"


@dataclass
class Response:
    status: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


def error_response(message: str, status: int = 500) -> Response:
    return Response(
        status=status,
        body=f"# Error: {message}\n".encode("utf-8"),
        headers={"Content-Type": "text/plain"},
    )


def assemble(resource: str, generator: RepositoryGenerator, list_all: bool = False) -> Response:
    """Produce the response for one repository resource.

    Signature resources get fresh random bytes on every call and never
    touch the upstream. Database resources run a full generation pass; any
    failure yields a single error response, never a partial archive.
    """
    name = generator.settings.name
    databases = (f"{name}.db", f"{name}.files")

    if list_all and resource in databases:
        try:
            filenames = generator.list_packages()
        except ReleaseDbError as e:
            logger.error("Package listing failed: %s", e)
            return error_response(str(e))
        body = "".join(f"{filename}\n" for filename in filenames)
        return Response(200, body.encode("utf-8"), {"Content-Type": "text/plain"})

    if resource in (f"{name}.db.sig", f"{name}.files.sig"):
        return Response(
            200,
            make_signature().data,
            {"Content-Type": "application/pgp-signature", "Cache-Control": SIG_CACHE_CONTROL},
        )

    if resource not in databases:
        return error_response(f"Unknown resource {resource}", status=404)

    try:
        repository = generator.generate()
    except ReleaseDbError as e:
        logger.error("Repository generation failed: %s", e)
        return error_response(f"generating repository: {e}")

    is_db = resource.endswith(".db")
    return Response(
        200,
        repository.db if is_db else repository.files,
        {
            "Content-Type": "application/vnd.pacman.db" if is_db else "application/vnd.pacman.files",
            "Content-Encoding": "gzip",
            "Cache-Control": DB_CACHE_CONTROL,
        },
    )
