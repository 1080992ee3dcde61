"""Route and router producers — deferred, declarative tree nodes.

A producer is a zero-argument callable describing one node of the
routing tree. Nothing runs until the tree is resolved, which lets a
producer validate its own configuration first and report a failure
instead of registering a half-configured endpoint::

    from trellis.tree import Route, Router, RouteSpec

    @Route
    def health():
        return RouteSpec("GET", "/health", [ok])

    api = Router.of("/api", auth, routes=[health])
    api.apply(engine)

A producer returns a ``RouteSpec`` / ``RouterSpec`` (plain tuples in the
same field order are accepted) and reports a failure either by raising
or by setting ``error`` on the returned tuple. Setting ``error`` keeps the other
fields, so the failure message can still name the method and path.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple, TypeAlias

from trellis._internal.types import Handler
from trellis.tree.errors import AbsentProducer

if TYPE_CHECKING:
    from trellis.tree.definitions import RouteDefinition, RouterDefinition
    from trellis.tree.protocol import RouterTarget, RouteTarget


class RouteSpec(NamedTuple):
    """What a route producer yields when invoked."""

    method: str
    path: str
    handlers: Sequence[Handler | None] | None = ()
    error: BaseException | str | None = None


class RouterSpec(NamedTuple):
    """What a router producer yields when invoked."""

    path: str
    handlers: Sequence[Handler | None] | None = ()
    routes: Sequence[Route | RouteProducer | None] | None = ()
    routers: Sequence[Router | RouterProducer | None] | None = ()
    error: BaseException | str | None = None


RouteProducer: TypeAlias = Callable[[], RouteSpec | tuple[Any, ...]]
RouterProducer: TypeAlias = Callable[[], RouterSpec | tuple[Any, ...]]


class Route:
    """A deferred route: invoke once to get method, path and handlers.

    Wraps a zero-argument callable, so it doubles as a decorator.
    ``Route(None)`` is the absent producer and fails to resolve.
    """

    __slots__ = ("_produce",)

    def __init__(self, produce: Route | RouteProducer | None) -> None:
        if isinstance(produce, Route):
            produce = produce._produce
        self._produce = produce

    @classmethod
    def of(cls, method: str, path: str, *handlers: Handler | None) -> Route:
        """Build a producer for a route known up front."""
        chain = tuple(handlers)
        return cls(lambda: RouteSpec(method, path, chain))

    @property
    def absent(self) -> bool:
        """True when there is no callable behind this producer."""
        return self._produce is None

    def __call__(self) -> RouteSpec:
        """Invoke the producer and normalize its result to a ``RouteSpec``."""
        if self._produce is None:
            raise AbsentProducer("Route", "route")
        result = self._produce()
        if isinstance(result, RouteSpec):
            return result
        if isinstance(result, tuple):
            return RouteSpec(*result)
        msg = f"route producer returned {type(result).__name__}, expected RouteSpec or tuple"
        raise TypeError(msg)

    def resolve(self) -> RouteDefinition:
        """Validate this producer and return its definition; see ``resolve_route``."""
        from trellis.tree.resolve import resolve_route

        return resolve_route(self)

    def apply(self, target: RouteTarget | None) -> Any:
        """Resolve, then register on *target*.

        Failures are raised as ``ResolveError`` or ``ApplyError`` so the
        phase that failed is never ambiguous.
        """
        from trellis.tree.resolve import resolve_then_apply

        return resolve_then_apply(self, target, operation="Route.apply")

    def __repr__(self) -> str:
        return f"Route({_describe(self._produce)})"


class Router:
    """A deferred router: a group path, shared handlers, and child producers.

    ``Router(None)`` is the absent producer and fails to resolve.
    """

    __slots__ = ("_produce",)

    def __init__(self, produce: Router | RouterProducer | None) -> None:
        if isinstance(produce, Router):
            produce = produce._produce
        self._produce = produce

    @classmethod
    def of(
        cls,
        path: str,
        *handlers: Handler | None,
        routes: Sequence[Route | RouteProducer | None] = (),
        routers: Sequence[Router | RouterProducer | None] = (),
    ) -> Router:
        """Build a producer for a router known up front."""
        chain = tuple(handlers)
        children = (tuple(routes), tuple(routers))
        return cls(lambda: RouterSpec(path, chain, *children))

    @property
    def absent(self) -> bool:
        """True when there is no callable behind this producer."""
        return self._produce is None

    def __call__(self) -> RouterSpec:
        """Invoke the producer and normalize its result to a ``RouterSpec``."""
        if self._produce is None:
            raise AbsentProducer("Router", "router")
        result = self._produce()
        if isinstance(result, RouterSpec):
            return result
        if isinstance(result, tuple):
            return RouterSpec(*result)
        msg = f"router producer returned {type(result).__name__}, expected RouterSpec or tuple"
        raise TypeError(msg)

    def resolve(self) -> RouterDefinition:
        """Validate this producer and its whole subtree; see ``resolve_router``."""
        from trellis.tree.resolve import resolve_router

        return resolve_router(self)

    def apply(self, target: RouterTarget | None) -> RouterTarget:
        """Resolve the whole subtree, then register it on *target*.

        Failures are raised as ``ResolveError`` or ``ApplyError``.
        Returns the group handle created for this router.
        """
        from trellis.tree.resolve import resolve_then_apply

        return resolve_then_apply(self, target, operation="Router.apply")

    def __repr__(self) -> str:
        return f"Router({_describe(self._produce)})"


def _describe(produce: Callable[..., Any] | None) -> str:
    if produce is None:
        return "None"
    return getattr(produce, "__qualname__", None) or repr(produce)
