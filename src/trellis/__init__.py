"""Trellis — declarative route trees for gin-style HTTP engines.

Describe routes as lazily evaluated producers, validate the whole tree
once, then register it onto an engine.

Basic usage::

    from trellis import Engine, Route, Router

    def hello(ctx):
        ctx.text("Hello, World!")

    root = Router.of("/", routes=[Route.of("GET", "/hello", hello)])

    engine = Engine()
    engine.mount(root)
    engine.run()

Serving requires pounce (``pip install trellis-routes[server]``).
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "Context",
    "Engine",
    "EngineConfig",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "Request",
    "Response",
    "Route",
    "RouteDefinition",
    "RouteSpec",
    "Router",
    "RouterDefinition",
    "RouterSpec",
    "TrellisError",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trellis`` fast while providing a clean top-level API.
    """
    if name == "Engine":
        from trellis.engine import Engine

        return Engine

    if name == "EngineConfig":
        from trellis.config import EngineConfig

        return EngineConfig

    if name in ("Context", "get_context"):
        from trellis import context as _ctx

        return getattr(_ctx, name)

    if name in ("Route", "Router", "RouteSpec", "RouterSpec"):
        from trellis.tree import producers as _producers

        return getattr(_producers, name)

    if name in ("RouteDefinition", "RouterDefinition"):
        from trellis.tree import definitions as _definitions

        return getattr(_definitions, name)

    if name == "Request":
        from trellis.http.request import Request

        return Request

    if name == "Response":
        from trellis.http.response import Response

        return Response

    if name in ("TrellisError", "ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound"):
        from trellis import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
