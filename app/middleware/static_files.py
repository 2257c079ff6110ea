"""Static asset stage.

Serves files from the public directory at the site root. A request that
matches a file is answered here; anything else falls through to the
routers.
"""

from __future__ import annotations

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import Receive, Scope, Send

from app.context import RequestContext
from app.middleware.base import PipelineStage


class StaticFilesMiddleware(PipelineStage):
    """Answer GET/HEAD requests that resolve to a file in `directory`.

    Directories are served through their index.html. Misses (including a
    directory's 404.html page) are passed on instead of being answered.
    """

    name = "static_files"

    def __init__(self, app, directory: str = "public") -> None:
        super().__init__(app)
        self.directory = directory
        self.files = StaticFiles(directory=directory, html=True, check_dir=False)

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["method"] in ("GET", "HEAD"):
            try:
                response = await self.files.get_response(self.files.get_path(scope), scope)
            except HTTPException as e:
                if e.status_code != 404:
                    raise
            else:
                if response.status_code != 404:
                    await response(scope, receive, send)
                    return

        await self.app(scope, receive, send)
