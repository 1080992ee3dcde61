"""Endpoint and RouteMatch frozen dataclasses."""

from dataclasses import dataclass

from trellis._internal.types import HandlerChain


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``     (is_param=False)
    Param:   ``/{id}``      (is_param=True, param_name="id")
    Typed:   ``/{id:int}``  (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Endpoint:
    """One registered method + absolute path + full handler chain.

    ``handlers`` already includes every ancestor group's handlers, in
    root-to-leaf order, followed by the route's own.
    """

    method: str
    path: str
    handlers: HandlerChain

    @property
    def handler_names(self) -> tuple[str, ...]:
        return tuple(getattr(h, "__qualname__", None) or repr(h) for h in self.handlers)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    endpoint: Endpoint
    path_params: dict[str, str]
