"""Immutable HTTP request.

Frozen metadata with async body access.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from trellis._internal.asgi import Receive, Scope
from trellis.errors import HTTPError
from trellis.http.headers import Headers
from trellis.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    The body is read asynchronously via ``.body()``, ``.json()`` or
    ``.text()`` and cached after the first read.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: body cache; the dict is shared by copies made with replace()
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Private: body size limit, 0 disables the check
    _max_body: int = field(default=0, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    async def body(self) -> bytes:
        """Read the full request body.

        Raises ``HTTPError(413)`` when the body exceeds the engine's
        ``max_content_length``.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if self._max_body and size > self._max_body:
                raise HTTPError(status=413, detail="Request body too large")
            chunks.append(chunk)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def text(self) -> str:
        """Read the body as UTF-8 text."""
        return (await self.body()).decode("utf-8")

    @classmethod
    def from_asgi(
        cls,
        scope: Scope,
        receive: Receive,
        *,
        max_body: int = 0,
    ) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
            _max_body=max_body,
        )
