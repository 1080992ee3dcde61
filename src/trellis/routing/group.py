"""Router groups — nested path prefixes with shared handler chains.

A group owns an absolute base path and the handlers every route below
it runs first. Opening a nested group or registering a route joins the
relative path onto the base path and appends the handlers onto the
chain, so a request for ``/api/users/42`` runs::

    root handlers -> /api handlers -> /users handlers -> route handlers

Groups implement the ``RouterTarget`` protocol from ``trellis.tree``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from trellis._internal.types import Handler, HandlerChain
from trellis.errors import ConfigurationError

if TYPE_CHECKING:
    from trellis.engine import Engine

_METHOD = re.compile(r"^[A-Z]+$")


def join_paths(base: str, relative: str) -> str:
    """Join a relative path onto an absolute base path.

    An empty relative path means the base itself. Repeated slashes are
    collapsed and a trailing slash is dropped, since matching ignores it.

    Examples::

        join_paths("/", "")            -> "/"
        join_paths("/1.1", "/2.1")     -> "/1.1/2.1"
        join_paths("/api/", "/users/") -> "/api/users"
    """
    if not relative:
        return base
    return "/" + "/".join(part for part in f"{base}/{relative}".split("/") if part)


def _check_relative(relative_path: str) -> None:
    if relative_path and not relative_path.startswith("/"):
        msg = f"Relative path must be empty or start with '/', got {relative_path!r}."
        raise ConfigurationError(msg)


class RouterGroup:
    """A path prefix plus the handlers shared by everything registered under it."""

    __slots__ = ("_engine", "base_path", "handlers")

    def __init__(self, engine: Engine, base_path: str = "/", handlers: HandlerChain = ()) -> None:
        self._engine = engine
        self.base_path = base_path
        self.handlers = handlers

    def group(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        """Open a nested group below this one."""
        _check_relative(relative_path)
        return RouterGroup(
            self._engine,
            join_paths(self.base_path, relative_path),
            self._combine(handlers),
        )

    def handle(self, method: str, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        """Register *handlers* for *method* at *relative_path* below this group.

        Raises ``ConfigurationError`` for a malformed method, an empty
        handler chain, or a path the router rejects.
        """
        if not _METHOD.match(method):
            msg = f"HTTP method must be an uppercase token, got {method!r}."
            raise ConfigurationError(msg)
        _check_relative(relative_path)
        chain = self._combine(handlers)
        if not chain:
            msg = f"There must be at least one handler for {method} {relative_path!r}."
            raise ConfigurationError(msg)
        self._engine._register(method, join_paths(self.base_path, relative_path), chain)
        return self

    def use(self, *handlers: Handler) -> RouterGroup:
        """Append handlers to this group's chain.

        Only affects routes registered afterwards.
        """
        self.handlers = self._combine(handlers)
        return self

    # -- Method shortcuts --

    def get(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("GET", relative_path, *handlers)

    def post(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("POST", relative_path, *handlers)

    def put(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("PUT", relative_path, *handlers)

    def patch(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("PATCH", relative_path, *handlers)

    def delete(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("DELETE", relative_path, *handlers)

    def head(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("HEAD", relative_path, *handlers)

    def options(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self.handle("OPTIONS", relative_path, *handlers)

    def _combine(self, handlers: tuple[Handler, ...]) -> HandlerChain:
        return (*self.handlers, *handlers)

    def __repr__(self) -> str:
        return f"RouterGroup({self.base_path!r}, handlers={len(self.handlers)})"
