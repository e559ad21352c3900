"""Failure responses for the native host.

``HTTPError`` subclasses become their status with the detail as body;
anything else is a logged 500. A handler registered with ``@app.error()``
for the exception type (checked first) or the status code replaces the
default body.
"""

import inspect
import logging
import traceback
from collections.abc import Callable, Mapping
from typing import Any

from wren._internal.invoke import invoke
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")

type ErrorHandlers = Mapping[int | type, Callable[..., Any]]


async def _run_custom(
    handlers: ErrorHandlers,
    status: int,
    request: Request,
    exc: Exception,
) -> Response | None:
    """Run the handler registered for *exc* or *status*, if any.

    A handler takes ``()``, ``(request)`` or ``(request, exc)``. A plain
    200 result is given the error status.
    """
    handler = handlers.get(type(exc)) or handlers.get(status)
    if handler is None:
        return None

    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    response = negotiate(await invoke(handler, *args))
    return response.with_status(status) if response.status == 200 else response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
) -> Response:
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    custom = await _run_custom(error_handlers, exc.status, request, exc)
    if custom is not None:
        return custom
    return Response(
        body=exc.detail or f"Error {exc.status}",
        status=exc.status,
        headers=exc.headers,
    )


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Log *exc* with its traceback and answer 500."""
    logger.exception("500 %s %s", request.method, request.path)

    custom = await _run_custom(error_handlers, 500, request, exc)
    if custom is not None:
        return custom
    if debug:
        return Response(
            body="".join(traceback.format_exception(exc)),
            status=500,
            content_type="text/plain; charset=utf-8",
        )
    return Response(body="Internal Server Error", status=500)
