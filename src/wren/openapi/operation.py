"""Operation builder: accumulates everything known about one operation.

The builder never touches the document. It only records what route
configuration asked for; ``Document.register_operation`` turns it into
the ``paths`` entry when the route tree compiles.
"""

from dataclasses import dataclass
from typing import Any

from wren.openapi.entities import SecurityRequirement


@dataclass(frozen=True, slots=True)
class Content:
    """A request body or response entry.

    ``structure`` is the Python type to reflect; ``None`` documents an
    entry without a body. For responses, ``status`` defaults to 200 and
    ``default=True`` documents the ``default`` response instead.

    ::

        Content(Pet)                                  # 200, application/json
        Content(None, status=204)                     # No Content
        Content(Error, default=True, description="Unexpected error")
        Content(bytes, content_type="image/png")
    """

    structure: Any = None
    status: int | None = None
    content_type: str = "application/json"
    description: str | None = None
    default: bool = False


@dataclass(frozen=True, slots=True)
class OperationOptions:
    """Operation settings collected from one ``Route.with_()`` call.

    ``None`` means "leave unchanged"; tuples are appended.
    """

    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    deprecated: bool | None = None
    requests: tuple[Content, ...] = ()
    responses: tuple[Content, ...] = ()


class OperationBuilder:
    """Mutable accumulator for one (method, path) operation.

    Created by ``Document.new_operation``. ``path`` is in brace syntax
    with converter suffixes already stripped; ``converters`` keeps them.
    """

    __slots__ = (
        "converters",
        "deprecated",
        "description",
        "method",
        "operation_id",
        "path",
        "requests",
        "responses",
        "security",
        "summary",
        "tags",
    )

    def __init__(self, method: str, path: str, converters: dict[str, str] | None = None) -> None:
        self.method = method
        self.path = path
        self.converters: dict[str, str] = dict(converters or {})
        self.operation_id: str | None = None
        self.summary: str | None = None
        self.description: str | None = None
        self.deprecated = False
        self.tags: list[str] = []
        self.security: list[SecurityRequirement] = []
        self.requests: list[Content] = []
        self.responses: list[Content] = []

    def apply(self, options: OperationOptions) -> None:
        """Merge one batch of options into the builder."""
        if options.operation_id is not None:
            self.operation_id = options.operation_id
        if options.summary is not None:
            self.summary = options.summary
        if options.description is not None:
            self.description = options.description
        if options.deprecated is not None:
            self.deprecated = options.deprecated
        self.requests.extend(options.requests)
        self.responses.extend(options.responses)

    def add_tags(self, *tags: str) -> None:
        self.tags.extend(tags)

    def add_security(self, *requirements: SecurityRequirement) -> None:
        self.security.extend(requirements)

    @property
    def key(self) -> str:
        """``"METHOD path"``, the form used in error messages and logs."""
        return f"{self.method} {self.path}"

    def __repr__(self) -> str:
        return f"OperationBuilder({self.key!r}, operation_id={self.operation_id!r})"
