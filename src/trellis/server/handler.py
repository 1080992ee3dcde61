"""ASGI request handler — the only component that dispatches raw requests.

Converts the ASGI scope to a ``Request``, matches it against the
compiled router, runs the matched handler chain through a fresh
``Context``, and sends the assembled response back through ``send()``.
A request that matches no endpoint runs no handler at all.
"""

from dataclasses import replace

from trellis._internal.asgi import Receive, Scope, Send
from trellis.context import Context, context_var
from trellis.errors import HTTPError, MethodNotAllowed, NotFound
from trellis.http.request import Request
from trellis.http.response import Response
from trellis.routing.router import Router
from trellis.server.errors import handle_http_error, handle_internal_error
from trellis.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    debug: bool = False,
    handle_method_not_allowed: bool = True,
    max_content_length: int = 0,
) -> None:
    """Process a single HTTP request."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive, max_body=max_content_length)

    try:
        response = await _dispatch(
            request,
            router,
            handle_method_not_allowed=handle_method_not_allowed,
        )
    except HTTPError as exc:
        response = handle_http_error(exc, request, debug=debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send, method=request.method)


async def _dispatch(
    request: Request,
    router: Router,
    *,
    handle_method_not_allowed: bool,
) -> Response:
    try:
        match = router.match(request.method, request.path)
    except MethodNotAllowed:
        if not handle_method_not_allowed:
            raise NotFound(f"No route matches {request.method} {request.path!r}") from None
        raise

    ctx = Context(replace(request, path_params=match.path_params), match.endpoint.handlers)
    token = context_var.set(ctx)
    try:
        await ctx.next()
    finally:
        context_var.reset(token)
    return ctx.response
