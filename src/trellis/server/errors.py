"""Error handling for requests.

Maps HTTPError exceptions and unexpected handler failures to Response
objects. Unexpected failures are logged with their traceback.
"""

import logging
import traceback

from trellis.errors import HTTPError
from trellis.http.request import Request
from trellis.http.response import Response

logger = logging.getLogger("trellis.server")


def handle_http_error(exc: HTTPError, request: Request, *, debug: bool) -> Response:
    """Map an HTTPError to a plain-text response carrying its headers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response = Response(body=detail, status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Turn an unexpected exception into a 500.

    In debug mode the body carries the formatted traceback.
    """
    logger.exception("500 %s %s", request.method, request.path)

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500)
    return Response(body="Internal Server Error", status=500)
