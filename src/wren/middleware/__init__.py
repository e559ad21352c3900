"""Middleware: any ``async def mw(request, next) -> Response`` callable.

Registered app-wide with ``App.add_middleware`` or per prefix through
``App.sub_scope(prefix, middleware=...)``.
"""

from wren.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
