"""Starlette host adapter.

Registers wren-bound handlers on a Starlette ``Router``::

    from starlette.applications import Starlette
    from starlette.middleware import Middleware

    app = Starlette()
    api = APIRouter(StarletteScope(app.router), OpenAPIConfig(title="Petstore"))
    admin = api.group("/admin", Middleware(AuthMiddleware))

Handlers are ordinary Starlette endpoints (``async def endpoint(request)``).
They may also return a wren ``Response``, which is converted; the docs
handlers rely on that.
"""

from collections.abc import Callable, Iterable
from typing import Any

from wren._internal.invoke import invoke
from wren.errors import ConfigurationError
from wren.host import ALL_METHODS
from wren.http.response import Response
from wren.routing.params import join_path, normalize_path

try:
    from starlette.middleware import Middleware
    from starlette.requests import Request as StarletteRequest
    from starlette.responses import Response as StarletteResponse
    from starlette.routing import Mount, Route, Router
except ImportError:
    msg = (
        "The Starlette adapter requires the 'starlette' package. "
        "Install it with: pip install wren[starlette]"
    )
    raise ConfigurationError(msg) from None

# Starlette answers CONNECT itself; TRACE is left to the server
SUPPORTED_METHODS = ALL_METHODS - {"CONNECT"}


def to_starlette_response(response: Response) -> StarletteResponse:
    return StarletteResponse(
        content=response.body_bytes,
        status_code=response.status,
        headers=dict(response.headers),
        media_type=response.content_type,
    )


def _endpoint(handler: Callable[..., Any]) -> Callable[[StarletteRequest], Any]:
    async def endpoint(request: StarletteRequest) -> Any:
        result = await invoke(handler, request)
        if isinstance(result, Response):
            return to_starlette_response(result)
        return result

    endpoint.__name__ = getattr(handler, "__name__", type(handler).__name__)
    return endpoint


class StarletteScope:
    """``HostScope`` over a Starlette ``Router``.

    Sub-scopes with a prefix become ``Mount`` entries wrapping their own
    ``Router`` and middleware. An empty prefix stays on the same router
    and passes its middleware to each ``Route``.
    """

    __slots__ = ("_middleware", "_router")

    def __init__(self, router: Router, middleware: Iterable[Middleware] = ()) -> None:
        self._router = router
        self._middleware: tuple[Middleware, ...] = tuple(middleware)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def methods(self) -> frozenset[str]:
        return SUPPORTED_METHODS

    def register_handler(self, method: str, path: str, handler: Callable[..., Any]) -> Route:
        route = Route(
            join_path(normalize_path(path)),
            _endpoint(handler),
            methods=[method.upper()],
            middleware=list(self._middleware) or None,
        )
        self._router.routes.append(route)
        return route

    def sub_scope(self, prefix: str, middleware: Iterable[Middleware] = ()) -> "StarletteScope":
        middleware = tuple(middleware)
        if join_path(prefix) == "/":
            return StarletteScope(self._router, (*self._middleware, *middleware))

        inner = Router()
        self._router.routes.append(
            Mount(
                join_path(normalize_path(prefix)),
                app=inner,
                middleware=list(middleware) or None,
            )
        )
        # Mount applies its own middleware; routes inside only need the rest
        return StarletteScope(inner, self._middleware)
