"""Native ASGI host.

Collects routes, middleware, error handlers and lifespan hooks during
setup and freezes them into a trie router on the first ASGI call.
"""

import threading
from collections.abc import Callable, Iterable
from typing import Any

from wren._internal.asgi import Handler, Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.config import AppConfig
from wren.host import ALL_METHODS
from wren.routing.params import join_path
from wren.routing.route import HostRoute
from wren.routing.router import Router, parse_path
from wren.server.handler import handle_request


class App:
    """The wren native application.

    Serves the routes registered on it and implements ``HostScope``, so an
    ``APIRouter`` can bind to it directly::

        app = App()
        api = APIRouter(app, OpenAPIConfig(title="Petstore"))

        def get_pet(pet_id: int):
            return {"id": pet_id}

        api.get("/pets/:pet_id", get_pet).with_(operation_id="getPet")

    Setup is single-threaded. The first ASGI call freezes the app under a
    lock with a double check, so concurrent first requests build the
    router once.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[HostRoute] = []
        self._middleware_list: list[Callable[..., Any]] = []
        self._error_handlers: dict[int | type, Callable[..., Any]] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

        # Set by _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a handler for a URL path.

        Paths accept ``{param}``, ``{param:int}`` and ``:param``.
        """

        def decorator(func: Handler) -> Handler:
            self._add_route(
                HostRoute(
                    path=path,
                    handler=func,
                    methods=frozenset(m.upper() for m in (methods or ["GET"])),
                    name=name,
                )
            )
            return func

        return decorator

    def _add_route(self, route: HostRoute) -> HostRoute:
        self._check_not_frozen()
        parse_path(route.path)
        self._pending_routes.append(route)
        return route

    @property
    def routes(self) -> tuple[HostRoute, ...]:
        return tuple(self._pending_routes)

    # -- HostScope --

    @property
    def methods(self) -> frozenset[str]:
        return ALL_METHODS

    def register_handler(self, method: str, path: str, handler: Handler) -> HostRoute:
        """Register *handler* for one method. Returns the route handle."""
        return self._add_route(
            HostRoute(path=join_path(path), handler=handler, methods=frozenset({method.upper()}))
        )

    def sub_scope(self, prefix: str, middleware: Iterable[Callable[..., Any]] = ()) -> "AppScope":
        return AppScope(self, join_path(prefix), tuple(middleware))

    # -- Hooks --

    def error(self, code_or_exception: int | type[Exception]) -> Callable[[Handler], Handler]:
        """Decorator registering a handler for a status code or exception type.

        Handlers may take ``()``, ``(request)`` or ``(request, exc)``.
        """

        def register(func: Handler) -> Handler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return register

    def add_middleware(self, middleware: Callable[..., Any]) -> None:
        """Append *middleware* to the app-wide stack (first added runs outermost)."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def on_startup(self, func: Handler) -> Handler:
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Handler) -> Handler:
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def run_startup(self) -> None:
        """Freeze the app and run its startup hooks in registration order."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def run_shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        started = False
        while True:
            event = (await receive())["type"]
            if event == "lifespan.startup" and not started:
                started = True
                try:
                    await self.run_startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif event == "lifespan.shutdown":
                await self.run_shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Freeze --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if not self._frozen:
                self._freeze()

    def _freeze(self) -> None:
        """Build the router. Caller holds ``_freeze_lock``."""
        router = Router()
        for route in self._pending_routes:
            router.add(route)
        router.compile()
        self._router = router
        self._middleware = tuple(self._middleware_list)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app once it is serving requests. "
                "Register routes, middleware, hooks and error handlers during setup."
            )
            raise RuntimeError(msg)


class AppScope:
    """A prefix of an ``App`` with its own middleware.

    Routes registered here run the scope's middleware inside the app-wide
    middleware. Nested scopes stack prefixes and middleware.
    """

    __slots__ = ("_app", "middleware", "prefix")

    def __init__(self, app: App, prefix: str, middleware: tuple[Callable[..., Any], ...]) -> None:
        self._app = app
        self.prefix = prefix
        self.middleware = middleware

    @property
    def methods(self) -> frozenset[str]:
        return self._app.methods

    def register_handler(self, method: str, path: str, handler: Handler) -> HostRoute:
        return self._app._add_route(
            HostRoute(
                path=join_path(self.prefix, path),
                handler=handler,
                methods=frozenset({method.upper()}),
                middleware=self.middleware,
            )
        )

    def sub_scope(self, prefix: str, middleware: Iterable[Callable[..., Any]] = ()) -> "AppScope":
        return AppScope(
            self._app,
            join_path(self.prefix, prefix),
            (*self.middleware, *middleware),
        )
