"""Per-request handler context.

Every matched request gets a fresh ``Context`` that walks the handler
chain registered for its route: group handlers first, root to leaf,
then the route's own handlers. A handler receives the context as its
only argument::

    async def timing(ctx: Context) -> None:
        start = time.monotonic()
        await ctx.next()                      # run the rest of the chain
        ctx.header("X-Time", f"{time.monotonic() - start:.3f}")

    def require_token(ctx: Context) -> None:
        if "authorization" not in ctx.request.headers:
            ctx.abort_with_status(401)        # later handlers never run

The current context is also available through ``get_context()`` for
code that cannot take it as a parameter.

Thread safety:
    A context belongs to one request. ``ContextVar`` keeps
    ``get_context()`` task-local under asyncio.
"""

from contextvars import ContextVar
from dataclasses import replace
from typing import Any

from trellis._internal.invoke import invoke
from trellis._internal.types import HandlerChain
from trellis.http.request import Request
from trellis.http.response import TEXT_CONTENT_TYPE, Response

_ABORT_INDEX = 1 << 30

context_var: ContextVar["Context"] = ContextVar("trellis_context")
"""The context of the request being handled. Set by the request handler."""


def get_context() -> "Context":
    """Return the current request's context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


class Context:
    """State for one request as it moves through its handler chain."""

    __slots__ = ("_handlers", "_index", "_keys", "_response", "request")

    def __init__(self, request: Request, handlers: HandlerChain) -> None:
        self.request = request
        self._handlers = handlers
        self._index = -1
        self._keys: dict[str, Any] = {}
        self._response = Response()

    # -- Chain control --

    async def next(self) -> None:
        """Run the remaining handlers in the chain.

        The request handler calls this once to start the chain. A handler
        may call it to run everything after itself, then continue; each
        handler still runs at most once.
        """
        self._index += 1
        while self._index < len(self._handlers):
            await invoke(self._handlers[self._index], self)
            self._index += 1

    def abort(self) -> None:
        """Stop the chain after the current handler returns."""
        self._index = _ABORT_INDEX

    @property
    def is_aborted(self) -> bool:
        return self._index >= _ABORT_INDEX

    def abort_with_status(self, status: int) -> None:
        """Set the status, drop any body, and stop the chain."""
        self._response = Response(status=status)
        self.abort()

    def abort_with_json(self, status: int, obj: Any) -> None:
        """Write a JSON body and stop the chain."""
        self.json(status, obj)
        self.abort()

    # -- Request access --

    @property
    def params(self) -> dict[str, str]:
        """Path parameters captured by the matched route."""
        return self.request.path_params

    def param(self, name: str) -> str:
        """Return a path parameter, ``""`` if the route did not capture it."""
        return self.request.path_params.get(name, "")

    # -- Per-request values --

    def set(self, key: str, value: Any) -> None:
        """Store a value for later handlers in this chain."""
        self._keys[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._keys.get(key, default)

    # -- Response writing --

    def status(self, status: int) -> None:
        self._response = self._response.with_status(status)

    def header(self, name: str, value: str) -> None:
        self._response = self._response.with_header(name, value)

    def json(self, status: int, obj: Any) -> None:
        """Write *obj* as the JSON response body."""
        rendered = Response.from_json(obj, status)
        self._response = replace(rendered, headers=self._response.headers)

    def text(self, status: int, body: str) -> None:
        """Write a plain-text response body."""
        self._response = replace(
            self._response, body=body, status=status, content_type=TEXT_CONTENT_TYPE
        )

    def data(self, status: int, content_type: str, body: bytes) -> None:
        """Write raw bytes with an explicit content type."""
        self._response = replace(
            self._response, body=body, status=status, content_type=content_type
        )

    @property
    def response(self) -> Response:
        """The response as assembled so far.

        A chain that writes nothing answers ``200`` with an empty body.
        """
        return self._response

    def __repr__(self) -> str:
        return f"<Context {self.request.method} {self.request.path} step={self._index}>"
