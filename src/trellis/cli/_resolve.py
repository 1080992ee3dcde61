"""Import resolution — turns ``"module:attribute"`` strings into trellis objects.

Shared by ``trellis check``, ``trellis routes`` and ``trellis run``.
"""

import importlib
from typing import TypeAlias

from trellis.engine import Engine
from trellis.tree.definitions import RouteDefinition, RouterDefinition
from trellis.tree.producers import Route, Router

Target: TypeAlias = Engine | Route | Router | RouteDefinition | RouterDefinition

_TARGET_TYPES = (Engine, Route, Router, RouteDefinition, RouterDefinition)


def resolve_target(import_string: str) -> Target:
    """Resolve an import string to an engine, producer or definition.

    Accepts ``"module:attribute"``. When the attribute is omitted it
    defaults to ``"root"`` (e.g. ``"myapp"`` resolves to ``myapp.root``).

    A plain callable that is not already one of the accepted types is
    treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the object is not an Engine, Route, Router or
            definition, or if a factory raised.
    """
    module_path, _, attr_name = import_string.partition(":")
    attr_name = attr_name or "root"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, _TARGET_TYPES):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, _TARGET_TYPES):
        msg = (
            f"{import_string!r} resolved to {type(obj).__name__}, "
            "not an Engine, Route, Router or definition"
        )
        raise TypeError(msg)

    return obj


def load_target(import_string: str) -> Target:
    """``resolve_target`` that exits with status 1 and a message on failure."""
    import sys

    try:
        return resolve_target(import_string)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
