"""Binding facade: one registration feeds both the host and the route tree.

Usage::

    app = App()
    api = APIRouter(app, OpenAPIConfig(title="Petstore"))

    pets = api.group("/pet").use(tags=["pet"])
    pets.get("/:petId", get_pet).with_(operation_id="getPetById", response=Pet)

    # Serves /docs and /docs/openapi.yaml, plus the routes above.
"""

import logging
import posixpath
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from wren.api.node import RouterNode
from wren.api.route import Route
from wren.config import OpenAPIConfig
from wren.docs import DocsPageHandler, SchemaFileHandler
from wren.errors import ConfigurationError, SpecError
from wren.host import HostScope
from wren.openapi.document import Document
from wren.openapi.entities import SecurityRequirement

logger = logging.getLogger("wren.openapi")


class BoundRoute:
    """A route registered with both the host and the tree.

    ``handle`` is whatever the host returned (a ``HostRoute`` on the
    native app, a Starlette ``Route`` on Starlette).
    """

    __slots__ = ("handle", "route")

    def __init__(self, route: Route, handle: Any) -> None:
        self.route = route
        self.handle = handle

    @property
    def method(self) -> str:
        return self.route.method

    @property
    def path(self) -> str:
        return self.route.path

    def with_(self, **options: Any) -> "BoundRoute":
        """Forward to ``Route.with_()``. Returns self for chaining."""
        self.route.with_(**options)
        return self

    def __repr__(self) -> str:
        return f"BoundRoute({self.method!r}, {self.path!r})"


class APIRouter:
    """Registers handlers on a host and documents them in one call."""

    __slots__ = ("_node", "_scope")

    def __init__(
        self,
        host: HostScope,
        config: OpenAPIConfig | None = None,
        *,
        document: Document | None = None,
        node: RouterNode | None = None,
    ) -> None:
        self._scope = host
        if node is not None:
            self._node = node
            return

        self._node = RouterNode.create(config, document=document)
        self._mount_docs()

    def _mount_docs(self) -> None:
        config = self._node.context.config
        if config.disable_openapi or config.disable_docs:
            return

        spec_path = config.resolved_spec_path
        fmt = "json" if posixpath.splitext(spec_path)[1].lower() == ".json" else "yaml"

        self._scope.register_handler("GET", config.docs_path, DocsPageHandler(config))
        self._scope.register_handler(
            "GET",
            spec_path,
            SchemaFileHandler(lambda: self._node.generate_schema(fmt), fmt),
        )
        logger.debug("docs mounted at %s (spec: %s)", config.docs_path, spec_path)

    # -- Introspection --

    @property
    def node(self) -> RouterNode:
        return self._node

    @property
    def host(self) -> HostScope:
        return self._scope

    # -- Registration --

    def add(
        self,
        method: str,
        path: str,
        handler: Callable[..., Any],
        *middleware: Callable[..., Any],
    ) -> BoundRoute:
        """Register *handler* on the host and document the route.

        *middleware* runs for this route only, inside any group middleware.
        """
        method = method.upper()
        if method not in self._scope.methods:
            msg = f"{type(self._scope).__name__} does not support method {method}"
            raise ConfigurationError(msg)

        self._node.context.check_not_compiled()
        scope = self._scope.sub_scope("", middleware) if middleware else self._scope
        handle = scope.register_handler(method, path, handler)
        # Documented only once the host has accepted the path
        route = self._node.add_route(method, path)
        return BoundRoute(route, handle)

    def get(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("GET", path, handler, *middleware)

    def post(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("POST", path, handler, *middleware)

    def put(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("PUT", path, handler, *middleware)

    def patch(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("PATCH", path, handler, *middleware)

    def delete(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("DELETE", path, handler, *middleware)

    def head(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("HEAD", path, handler, *middleware)

    def options(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("OPTIONS", path, handler, *middleware)

    def trace(self, path: str, handler: Callable[..., Any], *middleware: Callable[..., Any]) -> BoundRoute:
        return self.add("TRACE", path, handler, *middleware)

    def group(self, prefix: str, *middleware: Callable[..., Any]) -> "APIRouter":
        """A child router under *prefix*, with its own middleware."""
        node = self._node.group(prefix)
        return APIRouter(self._scope.sub_scope(prefix, middleware), node=node)

    def route(
        self,
        prefix: str,
        fn: Callable[["APIRouter"], Any],
        *middleware: Callable[..., Any],
    ) -> "APIRouter":
        child = self.group(prefix, *middleware)
        fn(child)
        return child

    def use(
        self,
        *,
        tags: Iterable[str] = (),
        security: Iterable[SecurityRequirement | str] = (),
        hide: bool = False,
    ) -> "APIRouter":
        self._node.use(tags=tags, security=security, hide=hide)
        return self

    # -- Output --

    def validate(self) -> SpecError | None:
        return self._node.validate()

    def generate_schema(self, format: str = "yaml") -> bytes:
        return self._node.generate_schema(format)

    def marshal_json(self) -> bytes:
        return self._node.marshal_json()

    def marshal_yaml(self) -> bytes:
        return self._node.marshal_yaml()

    def write_schema_to(self, path: str | Path) -> Path:
        return self._node.write_schema_to(path)
