"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Handlers never build one
directly; the per-request ``Context`` assembles it from ``ctx.json()``,
``ctx.text()`` and friends.
"""

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = TEXT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> "Response":
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        """Return a new Response with additional headers."""
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> "Response":
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    # -- Body helpers --

    @classmethod
    def from_json(cls, obj: Any, status: int = 200) -> "Response":
        """Serialize *obj* as a JSON response."""
        return cls(body=json_module.dumps(obj), status=status, content_type=JSON_CONTENT_TYPE)

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.body_bytes)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first header value for *name* (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return default
