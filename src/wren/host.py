"""Host capability interface.

A host is whatever actually serves requests: the native ``wren.App`` or a
third-party router behind an adapter. The binding facade only needs these
three things from it.
"""

from collections.abc import Callable, Iterable
from typing import Any, Protocol, runtime_checkable

ALL_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"}
)


@runtime_checkable
class HostScope(Protocol):
    """A place handlers can be registered, optionally under a prefix.

    ``register_handler`` returns the host's native route handle (a
    ``HostRoute`` for the native app, a Starlette ``Route`` for Starlette).
    ``sub_scope`` returns a scope whose registrations land under *prefix*
    and run through *middleware*, outermost first.
    """

    @property
    def methods(self) -> frozenset[str]: ...

    def register_handler(self, method: str, path: str, handler: Callable[..., Any]) -> Any: ...

    def sub_scope(
        self, prefix: str, middleware: Iterable[Callable[..., Any]] = ()
    ) -> "HostScope": ...
