"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from wren.http.request import Request
from wren.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        async def api_key(request: Request, next: Next) -> Response:
            if request.headers.get("x-api-key") != "secret":
                return Response("Unauthorized", status=401)
            return await next(request)
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
