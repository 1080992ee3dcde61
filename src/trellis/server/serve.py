"""Serve an engine with pounce.

Pounce's ``run()`` takes an import string, but an ``Engine`` is a live
object, so ``pounce.Server`` is used directly with the ASGI callable.
Pounce is an optional dependency (``pip install trellis-routes[server]``).
"""

from typing import Any

from trellis.errors import ConfigurationError


def run_server(
    app: Any,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    app_path: str | None = None,
    log_level: str = "info",
) -> None:
    """Start a pounce server for *app*.

    Args:
        app: ASGI callable (a trellis ``Engine``).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count; reload forces a single worker.
        reload: Restart on file changes (development).
        app_path: Optional ``"module:attribute"`` import string so
            reloads pick up code changes.
        log_level: Pounce log level (debug, info, warning, error).
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install trellis-routes[server]"
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        log_level=log_level,
    )
    server = Server(config, app, app_path=app_path)
    server.run()
