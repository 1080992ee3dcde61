"""Tests for trellis.context — handler chain execution and response writing."""

import asyncio

import pytest

from trellis.context import Context, context_var, get_context
from trellis.http.headers import Headers
from trellis.http.query import QueryParams
from trellis.http.request import Request


def _request(path_params: dict[str, str] | None = None) -> Request:
    async def receive() -> dict:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(
        method="GET",
        path="/x",
        headers=Headers(),
        query=QueryParams(),
        path_params=path_params or {},
        http_version="1.1",
        server=None,
        client=None,
        _receive=receive,
    )


def _recorder(log: list[str], name: str):
    def handler(ctx: Context) -> None:
        log.append(name)

    return handler


class TestChain:
    async def test_runs_in_order(self) -> None:
        log: list[str] = []
        ctx = Context(_request(), tuple(_recorder(log, n) for n in "abc"))
        await ctx.next()
        assert log == ["a", "b", "c"]

    async def test_sync_and_async_handlers(self) -> None:
        log: list[str] = []

        async def later(ctx: Context) -> None:
            await asyncio.sleep(0)
            log.append("async")

        ctx = Context(_request(), (_recorder(log, "sync"), later))
        await ctx.next()
        assert log == ["sync", "async"]

    async def test_next_wraps_remaining_chain(self) -> None:
        log: list[str] = []

        async def around(ctx: Context) -> None:
            log.append("before")
            await ctx.next()
            log.append("after")

        ctx = Context(_request(), (around, _recorder(log, "inner"), _recorder(log, "last")))
        await ctx.next()
        assert log == ["before", "inner", "last", "after"]

    async def test_each_handler_runs_once(self) -> None:
        log: list[str] = []

        async def twice(ctx: Context) -> None:
            await ctx.next()
            await ctx.next()

        ctx = Context(_request(), (twice, _recorder(log, "once")))
        await ctx.next()
        assert log == ["once"]

    async def test_abort_stops_chain(self) -> None:
        log: list[str] = []

        def guard(ctx: Context) -> None:
            ctx.abort_with_status(401)

        ctx = Context(_request(), (_recorder(log, "a"), guard, _recorder(log, "b")))
        await ctx.next()
        assert log == ["a"]
        assert ctx.is_aborted
        assert ctx.response.status == 401

    async def test_abort_with_json(self) -> None:
        def guard(ctx: Context) -> None:
            ctx.abort_with_json(403, {"error": "forbidden"})

        ctx = Context(_request(), (guard, _recorder([], "never")))
        await ctx.next()
        assert ctx.response.status == 403
        assert ctx.response.json() == {"error": "forbidden"}

    async def test_values_shared_along_chain(self) -> None:
        def producer(ctx: Context) -> None:
            ctx.set("user", "ada")

        def consumer(ctx: Context) -> None:
            ctx.text(200, ctx.get("user"))

        ctx = Context(_request(), (producer, consumer))
        await ctx.next()
        assert ctx.response.text == "ada"
        assert ctx.get("missing", "default") == "default"

    async def test_exception_propagates(self) -> None:
        def broken(ctx: Context) -> None:
            raise ValueError("nope")

        ctx = Context(_request(), (broken,))
        with pytest.raises(ValueError, match="nope"):
            await ctx.next()


class TestParams:
    def test_param(self) -> None:
        ctx = Context(_request({"movie_id": "7"}), ())
        assert ctx.param("movie_id") == "7"
        assert ctx.param("other") == ""
        assert ctx.params == {"movie_id": "7"}


class TestResponseWriting:
    def test_default_is_empty_200(self) -> None:
        response = Context(_request(), ()).response
        assert response.status == 200
        assert response.body == ""

    def test_json_keeps_headers(self) -> None:
        ctx = Context(_request(), ())
        ctx.header("X-Trace", "abc")
        ctx.json(201, {"id": 1})
        assert ctx.response.status == 201
        assert ctx.response.content_type == "application/json"
        assert ctx.response.header("x-trace") == "abc"

    def test_text(self) -> None:
        ctx = Context(_request(), ())
        ctx.text(202, "accepted")
        assert ctx.response.status == 202
        assert ctx.response.content_type.startswith("text/plain")

    def test_status_only(self) -> None:
        ctx = Context(_request(), ())
        ctx.status(204)
        assert ctx.response.status == 204

    def test_data(self) -> None:
        ctx = Context(_request(), ())
        ctx.data(200, "image/png", b"\x89PNG")
        assert ctx.response.body_bytes == b"\x89PNG"
        assert ctx.response.content_type == "image/png"


class TestGetContext:
    def test_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_context()

    def test_inside_request(self) -> None:
        ctx = Context(_request(), ())
        token = context_var.set(ctx)
        try:
            assert get_context() is ctx
        finally:
            context_var.reset(token)
