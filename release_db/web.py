"""HTTP front end serving the synthesized repository."""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from release_db.config import RepoSettings
from release_db.errors import ReleaseDbError
from release_db.generator import RepositoryGenerator
from release_db.listing import mirror_files, render_index
from release_db.responses import assemble

logger = logging.getLogger(__name__)

REPO_PREFIX = "/db/archlinux"


def create_app(settings: RepoSettings, generator: Optional[RepositoryGenerator] = None) -> FastAPI:
    """Application factory.

    The generator is stateless, so handlers share it; each request still
    runs its own fetch-and-build pass.
    """
    _app = FastAPI(title="release-db", version="0.1.0")
    _app.state.generator = generator or RepositoryGenerator(settings)

    @_app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @_app.get("/api/latest")
    def latest(request: Request):
        gen: RepositoryGenerator = request.app.state.generator
        try:
            return mirror_files(gen.fetch_releases())
        except ReleaseDbError as e:
            logger.error("Mirror listing failed: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)

    @_app.get(f"{REPO_PREFIX}/", response_class=HTMLResponse)
    def index(request: Request):
        gen: RepositoryGenerator = request.app.state.generator
        try:
            files = mirror_files(gen.fetch_releases())
        except ReleaseDbError as e:
            # The page still lists the metadata files when upstream is down
            logger.error("Index listing failed: %s", e)
            files = []
        now = datetime.now(timezone.utc)
        html = render_index(gen.settings, files, now, f"{REPO_PREFIX}/")
        return HTMLResponse(html, headers={
            "Cache-Control": "public, max-age=300",
            "Last-Modified": format_datetime(now, usegmt=True),
        })

    @_app.get(REPO_PREFIX + "/{resource}")
    def repository_resource(
        resource: str,
        request: Request,
        list_mode: Optional[str] = Query(None, alias="list"),
    ):
        gen: RepositoryGenerator = request.app.state.generator
        result = assemble(resource, gen, list_all=(list_mode == "all"))
        return Response(content=result.body, status_code=result.status, headers=result.headers)

    return _app
