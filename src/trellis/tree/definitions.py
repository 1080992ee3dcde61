"""Resolved route and router definitions.

Definitions are what a producer turns into once it has been resolved:
plain frozen values, owned by their parent, ready to be applied onto a
routing engine. The string form is stable and used in every error
message, so log lines stay comparable across releases.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from trellis._internal.types import HandlerChain
from trellis.tree.apply import apply_route, apply_router
from trellis.tree.protocol import RouterTarget, RouteTarget


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A resolved route, ready to be applied.

    Empty instances stand in for children that were never resolved when
    a parent fails part-way, which keeps the parent's counts accurate.
    """

    method: str = ""
    path: str = ""
    handlers: HandlerChain = ()

    def __str__(self) -> str:
        return (
            "Route<method, relativePath, handlerCount> = "
            f"({self.method}, {self.path}, {len(self.handlers)})"
        )

    def apply(self, target: RouteTarget | None) -> Any:
        """Register this route on *target*; see ``apply_route``."""
        return apply_route(self, target)


@dataclass(frozen=True, slots=True)
class RouterDefinition:
    """A resolved router: a group path, its handlers, and owned children."""

    path: str = ""
    handlers: HandlerChain = ()
    routes: tuple[RouteDefinition, ...] = ()
    routers: tuple["RouterDefinition", ...] = ()

    def __str__(self) -> str:
        return (
            "Router<relativePath, handlerCount, routeCount, routerCount> = "
            f"({self.path}, {len(self.handlers)}, {len(self.routes)}, {len(self.routers)})"
        )

    def apply(self, target: RouterTarget | None) -> RouterTarget:
        """Open a group on *target* and register every descendant; see ``apply_router``."""
        return apply_router(self, target)

    def walk(
        self,
        prefix: tuple[str, ...] = (),
    ) -> Iterator[tuple[tuple[str, ...], "RouteDefinition | RouterDefinition"]]:
        """Yield ``(relative_paths, node)`` for this router and every descendant.

        Depth first, in the same order ``apply`` registers them: the
        router itself, its routes, then each nested router. The path
        tuple holds the relative path of every ancestor, unjoined.
        """
        segments = (*prefix, self.path)
        yield segments, self
        for route in self.routes:
            yield (*segments, route.path), route
        for router in self.routers:
            yield from router.walk(segments)


def describe_tree(definition: RouteDefinition | RouterDefinition, indent: str = "  ") -> str:
    """Render a definition and its descendants as an indented outline.

    Example::

        Router<relativePath, handlerCount, routeCount, routerCount> = (/api, 1, 1, 0)
          Route<method, relativePath, handlerCount> = (GET, /health, 1)
    """
    if isinstance(definition, RouteDefinition):
        return str(definition)
    lines = [f"{indent * (len(path) - 1)}{node}" for path, node in definition.walk()]
    return "\n".join(lines)
