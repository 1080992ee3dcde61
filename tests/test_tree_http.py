"""End-to-end: a route tree applied onto the engine and driven over ASGI."""

import pytest

from trellis import Engine
from trellis.testing import TestClient
from trellis.tree import Route, Router


def _append(output: list[int], value: int):
    def handler(ctx) -> None:
        output.append(value)

    handler.__qualname__ = f"append({value})"
    return handler


def _build(output: list[int]) -> Router:
    return Router.of(
        "/1.1",
        _append(output, 1),
        _append(output, 2),
        routes=[
            Route.of("GET", "/2.1", _append(output, 3)),
            Route.of("GET", "/2.2", _append(output, -4)),
            Route.of("HEAD", "/2.3", _append(output, 6), _append(output, 7)),
        ],
        routers=[
            Router.of(
                "/2.2",
                _append(output, -5),
                routes=[Route.of("GET", "/3.1", _append(output, 4))],
                routers=[
                    Router.of("/3.2", routes=[Route.of("POST", "/4.1", _append(output, 5))]),
                ],
            ),
        ],
    )


class TestNestedTree:
    @pytest.mark.parametrize(
        ("method", "path", "expected"),
        [
            ("GET", "/1.1", []),
            ("GET", "/1.1/2.1", [1, 2, 3]),
            ("HEAD", "/1.1/2.1", []),
            ("GET", "/1.1/2.2", [1, 2, -4]),
            ("GET", "/1.1/2.2/3.1", [1, 2, -5, 4]),
            ("POST", "/1.1/2.2/3.1", []),
            ("POST", "/1.1/2.2/3.2/4.1", [1, 2, -5, 5]),
            ("HEAD", "/1.1/2.3", [1, 2, 6, 7]),
        ],
    )
    async def test_handler_order(self, method: str, path: str, expected: list[int]) -> None:
        output: list[int] = []
        engine = Engine()
        group = _build(output).apply(engine)
        assert group.base_path == "/1.1"

        async with TestClient(engine) as client:
            await client.request(method, path)

        assert output == expected

    async def test_statuses(self) -> None:
        engine = Engine()
        _build([]).apply(engine)

        async with TestClient(engine) as client:
            assert (await client.get("/1.1")).status == 404
            assert (await client.get("/1.1/2.1")).status == 200
            assert (await client.head("/1.1/2.1")).status == 405
            assert (await client.post("/1.1/2.2/3.1")).status == 405
            assert (await client.get("/nowhere")).status == 404

    def test_registered_chains(self) -> None:
        engine = Engine()
        _build([]).apply(engine)

        chains = {(e.method, e.path): e.handler_names for e in engine.routes}
        assert chains == {
            ("GET", "/1.1/2.1"): ("append(1)", "append(2)", "append(3)"),
            ("GET", "/1.1/2.2"): ("append(1)", "append(2)", "append(-4)"),
            ("HEAD", "/1.1/2.3"): ("append(1)", "append(2)", "append(6)", "append(7)"),
            ("GET", "/1.1/2.2/3.1"): ("append(1)", "append(2)", "append(-5)", "append(4)"),
            ("POST", "/1.1/2.2/3.2/4.1"): ("append(1)", "append(2)", "append(-5)", "append(5)"),
        }


class TestMount:
    async def test_mount_at_root(self) -> None:
        async def hello(ctx) -> None:
            ctx.text(200, "hello")

        engine = Engine()
        engine.mount(Router.of("", routes=[Route.of("GET", "/hello", hello)]))

        async with TestClient(engine) as client:
            response = await client.get("/hello")
            assert response.status == 200
            assert response.text == "hello"

    async def test_engine_middleware_runs_first(self) -> None:
        output: list[int] = []
        engine = Engine()
        engine.use(_append(output, 0))
        engine.mount(_build(output))

        async with TestClient(engine) as client:
            await client.get("/1.1/2.1")

        assert output == [0, 1, 2, 3]
