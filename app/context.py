# =============================================================================
# app/context.py - Request Context
# =============================================================================
# Per-request state shared by the pipeline stages and route handlers.
#
# The context is stored in the ASGI scope state, so handlers reach it with
# `request.state.ctx` (or the ContextDep dependency). It lives for exactly
# one request/response cycle.
#
# Lifecycle:
#   receiving -> in_pipeline -> dispatched -> responded
#                     \-> erred ----------------/
# =============================================================================

from __future__ import annotations

import json
import shutil
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable
from urllib.parse import parse_qsl, urlencode

from starlette.datastructures import Headers
from starlette.types import Scope
from urllib3 import encode_multipart_formdata

CONTEXT_KEY = "ctx"


class RequestState(str, Enum):
    """Where a request is in its lifecycle."""
    RECEIVING = "receiving"
    IN_PIPELINE = "in_pipeline"
    DISPATCHED = "dispatched"
    ERRED = "erred"
    RESPONDED = "responded"


@dataclass
class UploadedFile:
    """A file extracted from a multipart request."""
    field_name: str
    filename: str
    content_type: str
    size: int
    file: BinaryIO

    def read(self) -> bytes:
        """Return the full payload, leaving the handle rewound."""
        self.file.seek(0)
        data = self.file.read()
        self.file.seek(0)
        return data

    def save(self, destination: str | Path) -> Path:
        """Copy the payload to destination and return the written path."""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        self.file.seek(0)
        with destination.open("wb") as target:
            shutil.copyfileobj(self.file, target)
        self.file.seek(0)
        return destination

    def close(self) -> None:
        self.file.close()


@dataclass
class RequestContext:
    """
    Mutable state for one HTTP request.

    Stages read and rewrite `body`, `query` and `form` in place; the body
    parser replays the final `body` to the route handler and query changes
    are committed back to the scope with `commit_query()`.
    """
    method: str
    path: str
    client_ip: str
    headers: Headers
    query: list[tuple[str, str]]
    body: Any = field(default_factory=dict)
    raw_body: bytes = b""
    body_is_json: bool = False
    multipart_boundary: str | None = None
    cookies: dict[str, Any] = field(default_factory=dict)
    files: dict[str, list[UploadedFile]] = field(default_factory=dict)
    form: dict[str, Any] = field(default_factory=dict)
    query_polluted: dict[str, list[str]] = field(default_factory=dict)
    response_headers: dict[str, str] = field(default_factory=dict)
    response_size: int = 0
    state: RequestState = RequestState.RECEIVING
    stage: str | None = None
    trail: list[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.perf_counter)
    _finish_callbacks: list[Callable[[int], None]] = field(default_factory=list, repr=False)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_scope(cls, scope: Scope) -> RequestContext:
        """Return the context attached to scope, creating it on first use."""
        state = scope.setdefault("state", {})
        ctx = state.get(CONTEXT_KEY)
        if ctx is None:
            client = scope.get("client")
            ctx = cls(
                method=scope["method"],
                path=scope["path"],
                client_ip=client[0] if client else "unknown",
                headers=Headers(scope=scope),
                query=parse_qsl(
                    scope.get("query_string", b"").decode("latin-1"),
                    keep_blank_values=True,
                ),
            )
            state[CONTEXT_KEY] = ctx
        return ctx

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def advance(self, stage: str) -> None:
        """Enter the next pipeline stage."""
        if self.state in (RequestState.ERRED, RequestState.RESPONDED):
            raise RuntimeError(f"Cannot enter stage '{stage}' after the request {self.state.value}")
        self.state = RequestState.IN_PIPELINE
        self.stage = stage
        self.trail.append(stage)

    def dispatch(self) -> None:
        """Mark the request as handed to the router."""
        self.state = RequestState.DISPATCHED

    def fail(self) -> None:
        self.state = RequestState.ERRED

    def on_finish(self, callback: Callable[[int], None]) -> None:
        """Register a callback run with the final status code."""
        self._finish_callbacks.append(callback)

    def finish(self, status_code: int) -> None:
        """Mark the response as sent and run finish callbacks."""
        self.state = RequestState.RESPONDED
        callbacks, self._finish_callbacks = self._finish_callbacks, []
        for callback in callbacks:
            callback(status_code)

    # -------------------------------------------------------------------------
    # Query / Body
    # -------------------------------------------------------------------------

    @property
    def query_params(self) -> dict[str, str]:
        """Query as a plain mapping (last value wins)."""
        return dict(self.query)

    def commit_query(self, scope: Scope) -> None:
        """Write the current query items back to the scope."""
        scope["query_string"] = urlencode(self.query).encode("ascii")

    def replay_body(self) -> bytes:
        """Body bytes handed to the route handler."""
        if self.body_is_json:
            return json.dumps(self.body).encode("utf-8")
        if self.multipart_boundary is not None:
            return self._encode_multipart()
        return self.raw_body

    def _encode_multipart(self) -> bytes:
        """Re-encode the (sanitized) form fields and uploads."""
        fields: list[tuple[str, Any]] = [(name, str(value)) for name, value in self.form.items()]
        for name, uploads in self.files.items():
            for uploaded in uploads:
                fields.append((name, (uploaded.filename, uploaded.read(), uploaded.content_type)))
        body, _ = encode_multipart_formdata(fields, boundary=self.multipart_boundary)
        return body
