"""Route tree: groups of routes sharing a prefix and inherited metadata.

Usage::

    api = RouterNode.create(OpenAPIConfig(title="Petstore"))
    pets = api.group("/pet").use(tags=["pet"])
    pets.get("/:petId").with_(operation_id="getPet", security=["petstore_auth"])
    api.generate_schema("json")

Nothing is registered with the document until the first ``validate()``,
``generate_schema()`` or ``write_schema_to()``. After that the whole tree
is frozen.
"""

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from wren.api import compiler
from wren.api.context import BuildContext
from wren.api.metadata import Metadata
from wren.api.route import Route
from wren.config import OpenAPIConfig
from wren.errors import OperationError, PathError, SpecError
from wren.openapi.document import Document
from wren.openapi.entities import SecurityRequirement
from wren.routing.params import join_path, normalize_path


class RouterNode:
    """A group in the route tree.

    Every node of one tree shares a single ``BuildContext``. A node owns
    its routes and children; it keeps no reference to its parent.
    """

    __slots__ = ("_children", "_context", "_metadata", "_prefix", "_routes")

    def __init__(
        self,
        context: BuildContext,
        prefix: str = "/",
        metadata: Metadata | None = None,
    ) -> None:
        self._context = context
        self._prefix = join_path(prefix)
        self._metadata = metadata or Metadata()
        self._routes: list[Route] = []
        self._children: list[RouterNode] = []

    @classmethod
    def create(
        cls,
        config: OpenAPIConfig | None = None,
        *,
        document: Document | None = None,
    ) -> "RouterNode":
        """Create the root of a new tree with its own ``BuildContext``."""
        context = BuildContext(config, document=document)
        root = cls(context)
        context.root = root
        return root

    # -- Introspection --

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def children(self) -> "tuple[RouterNode, ...]":
        return tuple(self._children)

    @property
    def context(self) -> BuildContext:
        return self._context

    # -- Registration --

    def add_route(self, method: str, path: str) -> Route:
        """Register *method* on *path* below this node's prefix.

        Path problems are recorded in the tree's ``SpecError`` and the
        route comes back without an operation.
        """
        ctx = self._context
        ctx.check_not_compiled()
        method = method.upper()
        full = join_path(self._prefix, path)

        operation = None
        try:
            full = ctx.path_parser.parse(full)
            if ctx.document is not None and method != "CONNECT":
                operation = ctx.document.new_operation(method, full)
        except (PathError, OperationError) as exc:
            ctx.errors.add(exc)
            full = normalize_path(full)

        route = Route(ctx, method, full, operation, self._metadata)
        self._routes.append(route)
        ctx.logger.debug("%s %s → registered", method, full)
        return route

    def get(self, path: str) -> Route:
        return self.add_route("GET", path)

    def post(self, path: str) -> Route:
        return self.add_route("POST", path)

    def put(self, path: str) -> Route:
        return self.add_route("PUT", path)

    def patch(self, path: str) -> Route:
        return self.add_route("PATCH", path)

    def delete(self, path: str) -> Route:
        return self.add_route("DELETE", path)

    def head(self, path: str) -> Route:
        return self.add_route("HEAD", path)

    def options(self, path: str) -> Route:
        return self.add_route("OPTIONS", path)

    def trace(self, path: str) -> Route:
        return self.add_route("TRACE", path)

    def group(self, prefix: str) -> "RouterNode":
        """Create a child group under *prefix*.

        The child starts from this node's current metadata. Later
        ``use()`` calls on this node do not reach it.
        """
        self._context.check_not_compiled()
        child = RouterNode(self._context, join_path(self._prefix, prefix), self._metadata)
        self._children.append(child)
        return child

    def route(self, prefix: str, fn: Callable[["RouterNode"], Any]) -> "RouterNode":
        """Create a child group and hand it to *fn* for configuration."""
        child = self.group(prefix)
        fn(child)
        return child

    def use(
        self,
        *,
        tags: Iterable[str] = (),
        security: Iterable[SecurityRequirement | str] = (),
        hide: bool = False,
    ) -> "RouterNode":
        """Add metadata for routes and groups created after this call."""
        self._context.check_not_compiled()
        tags = tuple(tags)
        security = tuple(security)
        self._metadata = self._metadata.extend(tags, security, hide)
        log = self._context.logger
        if tags:
            log.debug("%s → tags: %s", self._prefix, list(tags))
        if security:
            log.debug("%s → security: %s", self._prefix, [getattr(s, "name", s) for s in security])
        if hide:
            log.debug("%s → hide: True", self._prefix)
        return self

    # -- Output --

    def compile(self) -> int:
        """Compile the whole tree now. Returns the operation count."""
        return compiler.compile_tree(self._context)

    def validate(self) -> SpecError | None:
        return compiler.validate(self._context)

    def generate_schema(self, format: str = "yaml") -> bytes:
        return compiler.generate_schema(self._context, format)

    def marshal_json(self) -> bytes:
        return compiler.generate_schema(self._context, "json")

    def marshal_yaml(self) -> bytes:
        return compiler.generate_schema(self._context, "yaml")

    def write_schema_to(self, path: str | Path) -> Path:
        return compiler.write_schema_to(self._context, path)

    def __repr__(self) -> str:
        return f"RouterNode({self._prefix!r}, routes={len(self._routes)}, children={len(self._children)})"
