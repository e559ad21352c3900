"""Wren exception hierarchy.

Shared across the route tree, the OpenAPI document, the host bindings and
the native server so every module raises and catches the same types.
"""

import threading
from collections.abc import Iterable
from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when configuration is invalid or an optional extra is missing."""


class PathError(WrenError):
    """A route path could not be turned into an OpenAPI path.

    Recorded when the route is registered, not when the tree compiles.
    """


class OperationError(WrenError):
    """An operation conflicts with one already registered.

    Duplicate operation IDs, duplicate method + path pairs, and
    undocumentable HTTP methods all land here.
    """


class SchemaError(WrenError):
    """A request or response structure cannot be reflected to JSON Schema."""


class SpecError(WrenError):
    """Thread-safe collector for every problem found while building a spec.

    A single ``validate()`` call reports the whole route tree at once::

        err = api.validate()
        if err is not None:
            for problem in err.errors:
                print(problem)

    ``str(err)`` renders one problem per line, in the order they were added.
    """

    def __init__(self, errors: Iterable[Exception] = ()) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._errors: list[Exception] = list(errors)

    def add(self, err: Exception | None) -> None:
        """Append *err*. ``None`` is ignored."""
        if err is None:
            return
        with self._lock:
            self._errors.append(err)

    @property
    def errors(self) -> tuple[Exception, ...]:
        """Collected errors in append order."""
        with self._lock:
            return tuple(self._errors)

    def has_errors(self) -> bool:
        with self._lock:
            return len(self._errors) > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def __str__(self) -> str:
        with self._lock:
            return "\n".join(str(err) for err in self._errors)

    def __repr__(self) -> str:
        return f"SpecError({list(self.errors)!r})"


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the native router or by handlers. The ASGI handler catches
    these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
