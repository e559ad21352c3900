"""Route records for the native host's router."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a route path.

    ``param`` is ``None`` for literal text. ``{rest:path}`` segments carry
    the ``path`` converter and swallow the remainder of the request path.
    """

    text: str
    param: str | None = None
    converter: str = "str"

    @property
    def is_param(self) -> bool:
        return self.param is not None

    @property
    def is_catch_all(self) -> bool:
        return self.param is not None and self.converter == "path"


@dataclass(frozen=True, slots=True)
class HostRoute:
    """A handler registered with the native host for a set of methods.

    ``middleware`` is the stack collected from every ``sub_scope`` the
    route went through, outermost first.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    middleware: tuple[Callable[..., Any], ...] = ()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: HostRoute
    path_params: dict[str, str]
