"""File upload stage.

Extracts multipart uploads into `ctx.files` (keyed by field name) and the
plain form fields into `ctx.form`. Size and type rules belong to the
handlers that accept uploads; nothing is rejected here.
"""

from __future__ import annotations

from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.types import Message, Receive, Scope, Send
from urllib3.filepost import choose_boundary

from app.context import RequestContext, UploadedFile
from app.exceptions import MalformedBodyError
from app.middleware.base import PipelineStage


class FileUploadMiddleware(PipelineStage):
    """Parse `multipart/form-data` bodies read by the body parser.

    The handler receives the fields as they are after sanitizing, re-encoded
    as multipart, so FastAPI's own `File()` / `Form()` parameters keep
    working. Upload handles held by the context are closed once the
    response has finished.
    """

    name = "file_upload"

    async def process(
        self, ctx: RequestContext, scope: Scope, receive: Receive, send: Send
    ) -> None:
        content_type = ctx.headers.get("content-type", "")
        if content_type.lower().startswith("multipart/form-data"):
            await self._extract(ctx, scope)
        await self.app(scope, receive, send)

    async def _extract(self, ctx: RequestContext, scope: Scope) -> None:
        raw = ctx.raw_body
        delivered = False

        async def buffered() -> Message:
            nonlocal delivered
            if delivered:
                return {"type": "http.disconnect"}
            delivered = True
            return {"type": "http.request", "body": raw, "more_body": False}

        try:
            form = await Request(scope, buffered).form()
        except MultiPartException as e:
            raise MalformedBodyError(f"Malformed multipart body: {e.message}") from e
        except HTTPException as e:
            # Starlette reports parser errors as a 400 once an app is in scope
            raise MalformedBodyError(f"Malformed multipart body: {e.detail}") from e

        for field_name, value in form.multi_items():
            if isinstance(value, UploadFile):
                uploaded = UploadedFile(
                    field_name=field_name,
                    filename=value.filename or "",
                    content_type=value.content_type or "application/octet-stream",
                    size=value.size if value.size is not None else 0,
                    file=value.file,
                )
                ctx.files.setdefault(field_name, []).append(uploaded)
            else:
                ctx.form[field_name] = value

        if ctx.files:
            ctx.on_finish(lambda _status: self._close(ctx))

        # The handler gets the sanitized fields re-encoded under a new boundary
        ctx.multipart_boundary = choose_boundary()
        scope["headers"] = [
            (key, value)
            for key, value in scope["headers"]
            if key not in (b"content-type", b"content-length")
        ] + [(b"content-type", f"multipart/form-data; boundary={ctx.multipart_boundary}".encode("latin-1"))]

    @staticmethod
    def _close(ctx: RequestContext) -> None:
        for uploads in ctx.files.values():
            for uploaded in uploads:
                uploaded.close()
