"""A single documented route in the tree."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from wren.api.metadata import Metadata
from wren.openapi.entities import SecurityRequirement
from wren.openapi.operation import Content, OperationBuilder, OperationOptions

if TYPE_CHECKING:
    from wren.api.context import BuildContext


def _as_content(value: Any) -> Content:
    return value if isinstance(value, Content) else Content(value)


class Route:
    """One method + path pair and the operation that documents it.

    ``operation`` is ``None`` when the description is disabled, the
    method is ``CONNECT``, or the path was rejected. ``with_()`` on such a
    route still checks the tree is not compiled but records nothing.
    """

    __slots__ = ("_context", "inherited", "method", "operation", "own", "path")

    def __init__(
        self,
        context: "BuildContext",
        method: str,
        path: str,
        operation: OperationBuilder | None,
        inherited: Metadata,
    ) -> None:
        self._context = context
        self.method = method
        self.path = path
        self.operation = operation
        self.inherited = inherited
        self.own = Metadata()

    @property
    def hidden(self) -> bool:
        return self.inherited.hidden or self.own.hidden

    def with_(
        self,
        *,
        operation_id: str | None = None,
        summary: str | None = None,
        description: str | None = None,
        deprecated: bool | None = None,
        tags: Iterable[str] = (),
        security: Iterable[SecurityRequirement | str] = (),
        request: Any = None,
        requests: Iterable[Content] = (),
        response: Any = None,
        responses: Iterable[Content] = (),
        hide: bool = False,
    ) -> "Route":
        """Configure the operation. Returns self for chaining.

        ``request`` and ``response`` accept either a ``Content`` or a bare
        structure (a 200 JSON response / JSON body)::

            route.with_(
                operation_id="getPet",
                summary="Find pet by ID",
                request=GetPet,
                responses=[Content(Pet), Content(None, status=404)],
            )

        Tags and security are added after the inherited ones when the tree
        compiles.
        """
        self._context.check_not_compiled()
        if self.operation is None:
            return self

        all_requests = tuple(requests)
        if request is not None:
            all_requests = (_as_content(request), *all_requests)
        all_responses = tuple(responses)
        if response is not None:
            all_responses = (_as_content(response), *all_responses)

        options = OperationOptions(
            operation_id=operation_id,
            summary=summary,
            description=description,
            deprecated=deprecated,
            requests=all_requests,
            responses=all_responses,
        )
        self.operation.apply(options)

        tags = tuple(tags)
        security = tuple(security)
        self.own = self.own.extend(tags, security, hide)
        self._log(options, tags, security, hide)
        return self

    def _log(
        self,
        options: OperationOptions,
        tags: tuple[str, ...],
        security: tuple[SecurityRequirement | str, ...],
        hide: bool,
    ) -> None:
        log = self._context.logger
        key = f"{self.method} {self.path}"
        for action, value in (
            ("operation_id", options.operation_id),
            ("summary", options.summary),
            ("description", options.description),
            ("deprecated", options.deprecated),
        ):
            if value is not None:
                log.debug("%s → %s: %s", key, action, value)
        if tags:
            log.debug("%s → tags: %s", key, list(tags))
        if security:
            log.debug("%s → security: %s", key, [getattr(s, "name", s) for s in security])
        for entry in options.requests:
            log.debug("%s → request: %s", key, _structure_name(entry.structure))
        for entry in options.responses:
            log.debug("%s → response %s: %s", key, entry.status or 200, _structure_name(entry.structure))
        if hide:
            log.debug("%s → hide: True", key)

    def __repr__(self) -> str:
        return f"Route({self.method!r}, {self.path!r})"


def _structure_name(structure: Any) -> str:
    if structure is None:
        return "None"
    return getattr(structure, "__name__", repr(structure))
