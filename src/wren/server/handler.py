"""Request pipeline of the native host.

app middleware → route match → route middleware → handler → negotiation.
Errors raised anywhere in the pipeline are turned into responses by
``wren.server.errors``.
"""

import inspect
from collections.abc import Callable, Sequence
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next
from wren.routing.params import convert_param, normalize_path, split_converters
from wren.routing.route import HostRoute
from wren.routing.router import Router
from wren.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.server.sender import send_response


def wrap_middleware(handler: Next, middleware: Sequence[Callable[..., Any]]) -> Next:
    """Wrap *handler* so ``middleware[0]`` runs outermost."""
    for mw in reversed(middleware):

        async def layer(request: Request, _mw: Any = mw, _inner: Next = handler) -> Response:
            return await _mw(request, _inner)

        handler = layer
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Serve one ``http`` scope. Other scope types are ignored."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def dispatch(req: Request) -> Response:
        match = router.match(req.method, req.path)
        route = match.route

        async def endpoint(r: Request) -> Response:
            return await call_handler(route, r)

        return await wrap_middleware(endpoint, route.middleware)(
            req.with_path_params(match.path_params)
        )

    try:
        response = await wrap_middleware(dispatch, middleware)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)

    await send_response(response, send, method=request.method)


async def call_handler(route: HostRoute, request: Request) -> Response:
    """Call *route*'s handler with injected arguments and negotiate the result."""
    _, converters = split_converters(normalize_path(route.path))
    params = {
        name: convert_param(raw, converters.get(name, "str"))
        for name, raw in request.path_params.items()
    }
    result = await invoke(route.handler, **_bind_arguments(route.handler, request, params))
    return negotiate(result)


def _coerce(value: Any, annotation: Any) -> Any:
    """Apply a plain type annotation (``int``, ``UUID``...) to a raw string."""
    if not isinstance(value, str) or not isinstance(annotation, type) or annotation is str:
        return value
    try:
        return annotation(value)
    except (ValueError, TypeError):
        return value


def _bind_arguments(
    handler: Callable[..., Any],
    request: Request,
    params: dict[str, Any],
) -> dict[str, Any]:
    """Keyword arguments for *handler*.

    A parameter named ``request`` or annotated ``Request`` receives the
    request. Parameters named after a path parameter receive its value,
    converted by the path's converter or else the annotation.
    """
    kwargs: dict[str, Any] = {}
    for name, param in inspect.signature(handler, eval_str=True).parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in params:
            kwargs[name] = _coerce(params[name], param.annotation)
    return kwargs
