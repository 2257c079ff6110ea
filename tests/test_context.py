# =============================================================================
# tests/test_context.py - Request Context Tests
# =============================================================================

import io

import pytest

from app.context import RequestContext, RequestState, UploadedFile


def make_scope(query_string: bytes = b"") -> dict:
    return {
        "type": "http",
        "method": "GET",
        "path": "/api/v1/bootcamps",
        "query_string": query_string,
        "headers": [(b"content-type", b"application/json")],
        "client": ("127.0.0.1", 50000),
    }


class TestRequestContext:
    """Test context creation and lifecycle transitions."""

    def test_from_scope(self):
        scope = make_scope(b"page=2&tag=a&tag=b")

        ctx = RequestContext.from_scope(scope)

        assert ctx.client_ip == "127.0.0.1"
        assert ctx.query == [("page", "2"), ("tag", "a"), ("tag", "b")]
        assert ctx.headers["content-type"] == "application/json"
        assert ctx.state is RequestState.RECEIVING
        # Same context for the rest of the request
        assert RequestContext.from_scope(scope) is ctx
        assert scope["state"]["ctx"] is ctx

    def test_lifecycle(self):
        ctx = RequestContext.from_scope(make_scope())

        ctx.advance("body_parser")
        ctx.advance("cookie_parser")
        assert ctx.state is RequestState.IN_PIPELINE
        assert ctx.stage == "cookie_parser"

        ctx.dispatch()
        assert ctx.state is RequestState.DISPATCHED

        ctx.finish(200)
        assert ctx.state is RequestState.RESPONDED
        assert ctx.trail == ["body_parser", "cookie_parser"]

    def test_no_stage_after_error(self):
        ctx = RequestContext.from_scope(make_scope())
        ctx.advance("body_parser")
        ctx.fail()

        with pytest.raises(RuntimeError):
            ctx.advance("cookie_parser")

    def test_finish_callbacks_run_once(self):
        ctx = RequestContext.from_scope(make_scope())
        statuses = []
        ctx.on_finish(statuses.append)

        ctx.finish(404)
        ctx.finish(404)

        assert statuses == [404]

    def test_commit_query(self):
        scope = make_scope(b"a=1")
        ctx = RequestContext.from_scope(scope)
        ctx.query = [("a", "1"), ("b", "x y")]

        ctx.commit_query(scope)

        assert scope["query_string"] == b"a=1&b=x+y"
        assert ctx.query_params == {"a": "1", "b": "x y"}

    def test_replay_body(self):
        ctx = RequestContext.from_scope(make_scope())
        ctx.raw_body = b"raw"
        assert ctx.replay_body() == b"raw"

        ctx.body = {"name": "&lt;b&gt;"}
        ctx.body_is_json = True
        assert ctx.replay_body() == b'{"name": "&lt;b&gt;"}'


class TestUploadedFile:

    def test_read_and_save(self, tmp_path):
        upload = UploadedFile(
            field_name="file",
            filename="photo.jpg",
            content_type="image/jpeg",
            size=4,
            file=io.BytesIO(b"data"),
        )

        assert upload.read() == b"data"
        saved = upload.save(tmp_path / "uploads" / "photo.jpg")
        assert saved.read_bytes() == b"data"

        upload.close()
        assert upload.file.closed
