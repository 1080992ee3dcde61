"""Compiled router with trie-based path matching.

Endpoints are added while the engine is being set up and the trie is
frozen before the first request is served.
"""

import re
from dataclasses import dataclass

from trellis.errors import ConfigurationError, MethodNotAllowed, NotFound
from trellis.routing.route import Endpoint, PathSegment, RouteMatch

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

_FOREIGN_PARAM = re.compile(r"^(?::\w+|\*\w+|<[^>]*>)$")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id}"        -> [..., PathSegment("{id}", is_param=True, param_name="id")]
        "/users/{id:int}"    -> [..., PathSegment("{id:int}", ..., param_type="int")]
        "/files/{path:path}" -> [..., PathSegment("{path:path}", ..., param_type="path")]

    Raises ``ConfigurationError`` for ``:param``, ``*param`` and
    ``<param>`` segments, and for unknown converters.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if _FOREIGN_PARAM.match(part):
            msg = (
                f"Route path {path!r} uses {part!r}; trellis expects "
                "{param} or {param:type} segments."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            param_name, _, param_type = part[1:-1].partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = (
                    f"Route path {path!r} uses unknown converter {param_type!r}; "
                    f"expected one of {', '.join(CONVERTERS)}."
                )
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable until the router is compiled."""

    __slots__ = ("catch_all", "children", "endpoints", "param_child")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all edge ({name:path}), consumes the rest of the path
        self.catch_all: _CatchAllEdge | None = None
        # Endpoints at this node, keyed by HTTP method
        self.endpoints: dict[str, Endpoint] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge."""

    param_name: str
    endpoints: dict[str, Endpoint]


class Router:
    """Trie router holding one endpoint per method and path.

    Usage::

        router = Router()
        router.add(Endpoint("GET", "/users/{id:int}", (handler,)))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_count", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False
        self._count = 0

    def add(self, endpoint: Endpoint) -> None:
        """Add an endpoint. Must be called before ``compile()``.

        Raises ``ConfigurationError`` if the path is malformed, if two
        different parameter names compete for the same position, or if
        the method is already registered for the path.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        table: dict[str, Endpoint] | None = None

        for seg in parse_path(endpoint.path):
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(seg.param_name or "path", {})
                table = node.catch_all.endpoints
                break

            if seg.is_param:
                name = seg.param_name or ""
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=name,
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                elif (node.param_child.param_name, node.param_child.param_type) != (
                    name,
                    seg.param_type,
                ):
                    existing = node.param_child
                    msg = (
                        f"{endpoint.path!r} declares {seg.value!r} where "
                        f"{{{existing.param_name}:{existing.param_type}}} is already registered."
                    )
                    raise ConfigurationError(msg)
                node = node.param_child.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        if table is None:
            table = node.endpoints

        if endpoint.method in table:
            msg = f"Handlers are already registered for {endpoint.method} {endpoint.path}."
            raise ConfigurationError(msg)
        table[endpoint.method] = endpoint
        self._count += 1

    @property
    def endpoints(self) -> list[Endpoint]:
        """Return every registered endpoint, in trie order."""
        result: list[Endpoint] = []
        self._collect(self._root, result)
        return result

    def _collect(self, node: _TrieNode, result: list[Endpoint]) -> None:
        result.extend(node.endpoints.values())
        for child in node.children.values():
            self._collect(child, result)
        if node.param_child is not None:
            self._collect(node.param_child.node, result)
        if node.catch_all is not None:
            result.extend(node.catch_all.endpoints.values())

    def __len__(self) -> int:
        return self._count

    def compile(self) -> None:
        """Freeze the router. No more endpoints can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the registered endpoints.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no endpoint matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        table, params = result
        if method in table:
            return RouteMatch(endpoint=table[method], path_params=params)
        raise MethodNotAllowed(frozenset(table))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Endpoint], dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.endpoints:
                return node.endpoints, params
            return None

        part = parts[index]

        # 1. Static child (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Parameter child
        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            new_params = {**params, edge.param_name: part}
            result = self._match_node(edge.node, parts, index + 1, new_params)
            if result is not None:
                return result

        # 3. Catch-all
        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.endpoints, {**params, node.catch_all.param_name: remaining}

        return None
