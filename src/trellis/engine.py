"""Trellis engine — the routing engine route trees are applied onto.

Mutable during setup (groups, routes, lifecycle hooks).
Frozen at runtime when ``run()`` or ``__call__()`` is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any

from trellis._internal.asgi import Receive, Scope, Send
from trellis._internal.types import Handler, HandlerChain
from trellis.config import EngineConfig
from trellis.routing.group import RouterGroup
from trellis.routing.route import Endpoint
from trellis.routing.router import Router
from trellis.server.handler import handle_request
from trellis.tree.definitions import RouterDefinition
from trellis.tree.producers import Router as RouterProducer

logger = logging.getLogger("trellis.engine")


class Engine:
    """The trellis routing engine and ASGI application.

    The engine is its own root group: ``handle``, ``group`` and the
    method shortcuts register below ``/``, so a route tree can be
    applied onto it directly::

        engine = Engine()
        engine.mount(api_router)     # resolve + apply a Router producer

    Thread safety:
        Setup is single-threaded (it happens before serving). The freeze
        transition uses a Lock + double-check so exactly one thread
        compiles the router, even when several ASGI workers receive
        their first request at the same time.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_root",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config: EngineConfig = config or EngineConfig()
        self._root = RouterGroup(self)
        self._router = Router()
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Registration (RouterTarget) --

    def handle(self, method: str, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        """Register a route below the root group."""
        return self._root.handle(method, relative_path, *handlers)

    def group(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        """Open a group below the root group."""
        return self._root.group(relative_path, *handlers)

    def use(self, *handlers: Handler) -> "Engine":
        """Add handlers that run before every route registered afterwards."""
        self._check_not_frozen()
        self._root.use(*handlers)
        return self

    def get(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.get(relative_path, *handlers)

    def post(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.post(relative_path, *handlers)

    def put(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.put(relative_path, *handlers)

    def patch(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.patch(relative_path, *handlers)

    def delete(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.delete(relative_path, *handlers)

    def head(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.head(relative_path, *handlers)

    def options(self, relative_path: str, /, *handlers: Handler) -> RouterGroup:
        return self._root.options(relative_path, *handlers)

    def mount(self, router: RouterProducer | RouterDefinition) -> RouterGroup:
        """Apply a route tree onto the root group.

        A ``Router`` producer is resolved first; resolve failures raise
        ``ResolveError`` and registration failures ``ApplyError``. A
        ``RouterDefinition`` is applied as-is.
        """
        group = router.apply(self)
        logger.debug("mounted %r at %s", router, group.base_path)
        return group

    @property
    def routes(self) -> list[Endpoint]:
        """Every registered endpoint, with its full handler chain."""
        return self._router.endpoints

    def _register(self, method: str, path: str, handlers: HandlerChain) -> None:
        """Add an endpoint to the route table. Called by ``RouterGroup.handle``."""
        self._check_not_frozen()
        self._router.add(Endpoint(method=method, path=path, handlers=handlers))
        logger.debug("registered %s %s (%d handlers)", method, path, len(handlers))

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    def freeze(self) -> None:
        """Compile the route table and reject further registration.

        Idempotent. Serving freezes implicitly; call this to fail on a
        bad route table before handing the engine to a server.
        """
        self._ensure_frozen()

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the route table and serve with pounce.

        ``config.debug`` enables reload in a single worker.
        """
        from trellis.server.serve import run_server

        self._ensure_frozen()
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            reload=self.config.debug,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            debug=self.config.debug,
            handle_method_not_allowed=self.config.handle_method_not_allowed,
            max_content_length=self.config.max_content_length,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the engine at startup (before the first HTTP request),
        then runs the registered startup/shutdown hooks.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self._run_hooks(self._startup_hooks)
                except Exception as exc:
                    logger.exception("startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self._run_hooks(self._shutdown_hooks)
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _run_hooks(self, hooks: list[Callable[..., Any]]) -> None:
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.compile()
            self._frozen = True
            logger.info("route table frozen with %d endpoints", len(self._router))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the engine after it has started serving requests. "
                "Register routes before calling engine.run()."
            )
            raise RuntimeError(msg)
