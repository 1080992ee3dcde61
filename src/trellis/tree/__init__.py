"""Route trees — declare, resolve, then apply.

A routing tree is described with lazily evaluated producers, validated
once into immutable definitions, and registered onto any engine that
exposes ``handle`` and ``group``::

    from trellis import Engine
    from trellis.tree import Route, Router

    root = Router.of(
        "/api",
        auth,
        routes=[Route.of("GET", "/health", ok)],
    )

    engine = Engine()
    root.apply(engine)   # or: definition = root.resolve(); definition.apply(engine)

Resolution and application are separate phases: nothing is registered
unless the whole tree resolved cleanly.
"""

from trellis.tree.definitions import RouteDefinition, RouterDefinition, describe_tree
from trellis.tree.errors import (
    AbsentProducer,
    ApplyError,
    ChildFailure,
    ErrorKind,
    MissingHandler,
    MissingTarget,
    ProducerError,
    ResolveError,
    RouteTreeError,
    StageError,
)
from trellis.tree.producers import Route, Router, RouterSpec, RouteSpec
from trellis.tree.protocol import RouterTarget, RouteTarget
from trellis.tree.resolve import resolve_route, resolve_router, resolve_then_apply
from trellis.tree.apply import apply_route, apply_router

__all__ = [
    "AbsentProducer",
    "ApplyError",
    "ChildFailure",
    "ErrorKind",
    "MissingHandler",
    "MissingTarget",
    "ProducerError",
    "ResolveError",
    "Route",
    "RouteDefinition",
    "RouteSpec",
    "RouteTarget",
    "RouteTreeError",
    "Router",
    "RouterDefinition",
    "RouterSpec",
    "RouterTarget",
    "StageError",
    "apply_route",
    "apply_router",
    "describe_tree",
    "resolve_route",
    "resolve_router",
    "resolve_then_apply",
]
