"""Apply — register resolved definitions onto a routing engine.

Apply trusts its input: definitions come from the resolver, so handler
presence is not checked again here. Registration is fail-fast and is
not rolled back; siblings registered before a failure stay registered,
and the caller is expected to abort startup.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from trellis.tree.errors import ChildFailure, MissingTarget

if TYPE_CHECKING:
    from trellis.tree.definitions import RouteDefinition, RouterDefinition
    from trellis.tree.protocol import RouterTarget, RouteTarget

logger = logging.getLogger("trellis.tree")


def apply_route(definition: RouteDefinition, target: RouteTarget | None) -> Any:
    """Register *definition* with ``target.handle`` and return what it returns.

    Raises:
        MissingTarget: If *target* is ``None``.
    """
    if target is None:
        raise MissingTarget("RouteDefinition.apply", definition)
    handle = target.handle(definition.method, definition.path, *definition.handlers)
    logger.debug("applied %s", definition)
    return handle


def apply_router(definition: RouterDefinition, target: RouterTarget | None) -> RouterTarget:
    """Open a group for *definition* on *target*, then apply every child to it.

    Child routes are applied first, in order, then child routers. The
    first failure stops the walk and is wrapped in a ``ChildFailure``
    carrying the child's index; errors raised by the engine itself
    (duplicate routes, malformed paths) are wrapped the same way.

    Returns:
        The group handle created for this router.

    Raises:
        MissingTarget: If *target* is ``None``.
        ChildFailure: If any descendant fails to apply.
    """
    if target is None:
        raise MissingTarget("RouterDefinition.apply", definition)

    group = target.group(definition.path, *definition.handlers)

    for i, route in enumerate(definition.routes):
        try:
            apply_route(route, group)
        except Exception as exc:
            raise ChildFailure(
                "RouterDefinition.apply",
                child="route",
                index=i,
                stage="apply",
                definition=definition,
                cause=exc,
            ) from exc

    for i, router in enumerate(definition.routers):
        try:
            apply_router(router, group)
        except Exception as exc:
            raise ChildFailure(
                "RouterDefinition.apply",
                child="router",
                index=i,
                stage="apply",
                definition=definition,
                cause=exc,
            ) from exc

    logger.debug("applied %s", definition)
    return group
