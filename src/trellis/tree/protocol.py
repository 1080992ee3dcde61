"""Registration contract consumed by the applier.

Any routing engine can receive a resolved tree as long as it exposes
these two methods. The engine owns path concatenation; the tree only
passes relative paths down::

    class MyGroup:
        def handle(self, method, relative_path, /, *handlers): ...
        def group(self, relative_path, /, *handlers): ...

No base class required. ``trellis.Engine`` and ``RouterGroup`` satisfy
both protocols.
"""

from typing import Any, Protocol, runtime_checkable

from trellis._internal.types import Handler


@runtime_checkable
class RouteTarget(Protocol):
    """Something a single method + path + handler chain can be registered on."""

    def handle(self, method: str, relative_path: str, /, *handlers: Handler) -> Any: ...


@runtime_checkable
class RouterTarget(RouteTarget, Protocol):
    """A route target that can also open a nested group."""

    def group(self, relative_path: str, /, *handlers: Handler) -> "RouterTarget": ...
