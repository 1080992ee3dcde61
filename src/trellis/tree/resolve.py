"""Resolve — turn producers into validated, immutable definitions.

Resolution walks the whole reachable tree once, invoking every producer
exactly once, and stops at the first problem. Each level wraps the
failure with its own rendered definition and the child's index, so the
final message reads from the root down to the offending node::

    Router.resolve router error at index 0 (Router<...> = (/api, 1, 2, 1)):
    Router.resolve route error at index 1 (Router<...> = (/users, 0, 3, 0)):
    Route.resolve nil handler at index 0 (Route<...> = (GET, /{id}, 1))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from trellis.errors import TrellisError
from trellis.tree.definitions import RouteDefinition, RouterDefinition
from trellis.tree.errors import (
    AbsentProducer,
    ApplyError,
    ChildFailure,
    MissingHandler,
    ProducerError,
    ResolveError,
    RouteTreeError,
)
from trellis.tree.producers import Route, RouteProducer, Router, RouterProducer

if TYPE_CHECKING:
    from trellis.tree.protocol import RouteTarget

logger = logging.getLogger("trellis.tree")


def resolve_route(producer: Route | RouteProducer | None) -> RouteDefinition:
    """Invoke a route producer once and validate what it returned.

    Raises:
        AbsentProducer: If *producer* is ``None`` or wraps ``None``.
        ProducerError: If the producer raised, set ``error``, or returned
            a single object where a sequence belongs.
        MissingHandler: If a handler is ``None`` or not callable.
    """
    route = producer if isinstance(producer, Route) else Route(producer)
    if route.absent:
        raise AbsentProducer("Route.resolve", "route")

    try:
        spec = route()
    except Exception as exc:
        raise ProducerError("Route.resolve", "route", RouteDefinition(), exc) from exc

    try:
        handlers = _sequence(spec.handlers, "handlers")
    except TypeError as exc:
        partial = RouteDefinition(spec.method, spec.path)
        raise ProducerError("Route.resolve", "route", partial, exc) from exc

    definition = RouteDefinition(spec.method, spec.path, handlers)
    if spec.error is not None:
        cause = _as_exception(spec.error)
        raise ProducerError("Route.resolve", "route", definition, cause) from cause

    _check_handlers("Route.resolve", definition)

    logger.debug("resolved %s", definition)
    return definition


def resolve_router(producer: Router | RouterProducer | None) -> RouterDefinition:
    """Invoke a router producer once, validate it, and resolve its subtree.

    Child slots are sized from the producer's output before anything is
    checked, so even the partial definition attached to an error reports
    the real route and router counts. Children are resolved in order,
    routes first; the first failure stops the walk.

    Raises:
        AbsentProducer: If *producer* is ``None`` or wraps ``None``.
        ProducerError: If the producer raised, set ``error``, or returned
            a single object where a sequence belongs.
        MissingHandler: If one of the router's own handlers is missing.
        ChildFailure: If a nested route or router fails to resolve.
    """
    router = producer if isinstance(producer, Router) else Router(producer)
    if router.absent:
        raise AbsentProducer("Router.resolve", "router")

    try:
        spec = router()
    except Exception as exc:
        raise ProducerError("Router.resolve", "router", RouterDefinition(), exc) from exc

    # Sized in order; a non-sequence field leaves itself and later ones empty.
    sized: list[tuple[Any, ...]] = []
    for name in ("handlers", "routes", "routers"):
        try:
            sized.append(_sequence(getattr(spec, name), name))
        except TypeError as exc:
            sized.extend([()] * (3 - len(sized)))
            partial = RouterDefinition(
                spec.path,
                sized[0],
                (RouteDefinition(),) * len(sized[1]),
                (RouterDefinition(),) * len(sized[2]),
            )
            raise ProducerError("Router.resolve", "router", partial, exc) from exc
    handlers, route_producers, router_producers = sized

    routes = [RouteDefinition()] * len(route_producers)
    routers = [RouterDefinition()] * len(router_producers)

    def current() -> RouterDefinition:
        return RouterDefinition(spec.path, handlers, tuple(routes), tuple(routers))

    if spec.error is not None:
        cause = _as_exception(spec.error)
        raise ProducerError("Router.resolve", "router", current(), cause) from cause

    _check_handlers("Router.resolve", current())

    for i, child in enumerate(route_producers):
        try:
            routes[i] = resolve_route(child)
        except RouteTreeError as exc:
            raise ChildFailure(
                "Router.resolve",
                child="route",
                index=i,
                stage="resolve",
                definition=current(),
                cause=exc,
            ) from exc

    for i, child in enumerate(router_producers):
        try:
            routers[i] = resolve_router(child)
        except RouteTreeError as exc:
            raise ChildFailure(
                "Router.resolve",
                child="router",
                index=i,
                stage="resolve",
                definition=current(),
                cause=exc,
            ) from exc

    definition = current()
    logger.debug("resolved %s", definition)
    return definition


def resolve_then_apply(
    producer: Route | Router,
    target: RouteTarget | None,
    *,
    operation: str,
) -> Any:
    """Resolve *producer*, then apply the result to *target*.

    Resolve failures surface as ``ResolveError`` and apply failures as
    ``ApplyError``, each wrapping the underlying error.
    """
    try:
        definition = producer.resolve()
    except RouteTreeError as exc:
        raise ResolveError(operation, exc) from exc

    try:
        return definition.apply(target)  # type: ignore[arg-type]
    except Exception as exc:
        raise ApplyError(operation, exc) from exc


def _check_handlers(operation: str, definition: RouteDefinition | RouterDefinition) -> None:
    for i, handler in enumerate(definition.handlers):
        if handler is None or not callable(handler):
            raise MissingHandler(operation, i, definition)


def _sequence(value: Any, field: str) -> tuple[Any, ...]:
    if value is None:
        return ()
    try:
        return tuple(value)
    except TypeError:
        msg = f"{field} must be a sequence, got {type(value).__name__}"
        raise TypeError(msg) from None


def _as_exception(error: BaseException | str) -> BaseException:
    if isinstance(error, BaseException):
        return error
    return TrellisError(error)
