"""Trellis exception hierarchy.

Shared across the engine, router, request handler and CLI so every
module raises and catches the same types. Route tree errors (resolve
and apply failures) live in ``trellis.tree.errors`` and also derive
from ``TrellisError``.
"""

from dataclasses import dataclass


class TrellisError(Exception):
    """Base for all trellis-specific errors."""


class ConfigurationError(TrellisError):
    """Raised when a registration or engine setting is invalid.

    Typically raised while a route tree is being applied, so the caller
    sees it wrapped with the position of the offending node.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(TrellisError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or by handlers. The request handler catches
    these and turns them into a response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — a route exists for the path but not for this HTTP method.

    Carries an ``Allow`` header listing the registered methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
