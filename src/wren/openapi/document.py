"""OpenAPI document: operation registry and serializer.

The document is the schema side of the route tree. It hands out
``OperationBuilder`` instances for new routes, turns compiled builders into
``paths`` entries, and serializes the whole description to JSON or YAML.

Structural problems are raised as typed errors so the compiler can collect
them all instead of stopping at the first one:

- ``PathError``: malformed path, or a path parameter declared in a request
  structure but absent from the path
- ``OperationError``: undocumentable method, duplicate operation ID,
  duplicate method + path
- ``SchemaError``: a structure the reflector cannot express
"""

import http
import json
import logging
import re
from typing import Any

import yaml

from wren.config import OpenAPIConfig
from wren.errors import ConfigurationError, OperationError, PathError, SchemaError
from wren.openapi.operation import Content, OperationBuilder
from wren.openapi.reflector import Reflector
from wren.routing.params import split_converters

logger = logging.getLogger("wren.openapi")

DOCUMENTED_METHODS = frozenset(
    {"GET", "PUT", "POST", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE"}
)

SERIALIZE_FORMATS = ("json", "yaml", "yml")

_VERSION_30_RE = re.compile(r"^3\.0\.\d(-.+)?$")
_VERSION_31_RE = re.compile(r"^3\.1\.\d+(-.+)?$")
_PARAM_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Converter → schema of an undeclared path parameter
_CONVERTER_SCHEMAS: dict[str, dict[str, str]] = {
    "str": {"type": "string"},
    "path": {"type": "string"},
    "int": {"type": "integer"},
    "float": {"type": "number"},
}


class _NoAliasDumper(yaml.SafeDumper):
    """SafeDumper that writes repeated sub-objects out in full."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def check_openapi_version(version: str) -> ConfigurationError | None:
    """Return an error for versions outside 3.0.x and 3.1.x, else ``None``."""
    if _VERSION_30_RE.match(version) or _VERSION_31_RE.match(version):
        return None
    msg = f"Unsupported OpenAPI version {version!r}: expected 3.0.x or 3.1.x"
    return ConfigurationError(msg)


def path_param_names(path: str) -> list[str]:
    """Validate a brace-syntax path and return its parameter names in order.

    Raises ``PathError`` for a missing leading slash, unbalanced or nested
    braces, invalid names, and repeated names.
    """
    if not path.startswith("/"):
        msg = f"Path {path!r} must start with '/'"
        raise PathError(msg)

    names: list[str] = []
    start = -1
    for index, char in enumerate(path):
        if char == "{":
            if start != -1:
                msg = f"Path {path!r} has nested '{{' at position {index}"
                raise PathError(msg)
            start = index
        elif char == "}":
            if start == -1:
                msg = f"Path {path!r} has unmatched '}}' at position {index}"
                raise PathError(msg)
            name = path[start + 1 : index]
            if not _PARAM_NAME_RE.match(name):
                msg = f"Path {path!r} has invalid parameter name {name!r}"
                raise PathError(msg)
            if name in names:
                msg = f"Path {path!r} repeats parameter {name!r}"
                raise PathError(msg)
            names.append(name)
            start = -1
    if start != -1:
        msg = f"Path {path!r} has unclosed '{{' at position {start}"
        raise PathError(msg)
    return names


def _status_phrase(status: int) -> str:
    try:
        return http.HTTPStatus(status).phrase
    except ValueError:
        return "Response"


class Document:
    """An OpenAPI 3.0 / 3.1 description under construction.

    ::

        doc = Document(OpenAPIConfig(title="Petstore"))
        op = doc.new_operation("GET", "/pets/{id:int}")
        op.operation_id = "getPet"
        doc.register_operation(op)
        doc.serialize("json")
    """

    __slots__ = ("_config", "_operation_ids", "_paths", "_reflector", "openapi_31")

    def __init__(self, config: OpenAPIConfig | None = None) -> None:
        self._config = config or OpenAPIConfig()
        self.openapi_31 = not _VERSION_30_RE.match(self._config.openapi_version)
        self._reflector = Reflector(self._config.reflector, openapi_31=self.openapi_31)
        self._paths: dict[str, dict[str, Any]] = {}
        self._operation_ids: dict[str, str] = {}

    @property
    def config(self) -> OpenAPIConfig:
        return self._config

    @property
    def paths(self) -> dict[str, dict[str, Any]]:
        """Registered operations by path, then lower-case method."""
        return {path: dict(ops) for path, ops in self._paths.items()}

    # -- Operations --

    def new_operation(self, method: str, path: str) -> OperationBuilder:
        """Create a builder for *method* on *path*.

        *path* is in brace syntax and may carry converter suffixes
        (``{id:int}``), which type auto-documented path parameters.
        """
        method = method.upper()
        if method not in DOCUMENTED_METHODS:
            msg = f"{method} {path}: method {method} cannot be documented"
            raise OperationError(msg)
        bare, converters = split_converters(path)
        path_param_names(bare)
        return OperationBuilder(method, bare, converters)

    def register_operation(self, builder: OperationBuilder) -> None:
        """Add a compiled builder to ``paths``.

        Nothing is recorded when an error is raised.
        """
        if builder.operation_id is not None and builder.operation_id in self._operation_ids:
            first = self._operation_ids[builder.operation_id]
            msg = (
                f"Duplicate operation ID {builder.operation_id!r}: "
                f"used by {first} and {builder.key}"
            )
            raise OperationError(msg)

        existing = self._paths.get(builder.path, {})
        if builder.method.lower() in existing:
            msg = f"Duplicate operation {builder.key}"
            raise OperationError(msg)

        try:
            operation = self._build_operation(builder)
        except SchemaError as exc:
            msg = f"{builder.key}: {exc}"
            raise SchemaError(msg) from exc

        self._paths.setdefault(builder.path, {})[builder.method.lower()] = operation
        if builder.operation_id is not None:
            self._operation_ids[builder.operation_id] = builder.key
        logger.debug("%s → registered", builder.key)

    def _build_operation(self, builder: OperationBuilder) -> dict[str, Any]:
        operation: dict[str, Any] = {}
        if builder.tags:
            operation["tags"] = list(builder.tags)
        if builder.summary:
            operation["summary"] = builder.summary
        if builder.description:
            operation["description"] = builder.description
        if builder.operation_id:
            operation["operationId"] = builder.operation_id

        parameters, request_body = self._build_request(builder)
        if parameters:
            operation["parameters"] = parameters
        if request_body is not None:
            operation["requestBody"] = request_body

        operation["responses"] = self._build_responses(builder.responses)

        if builder.deprecated:
            operation["deprecated"] = True
        if builder.security:
            operation["security"] = [req.to_dict() for req in builder.security]
        return operation

    def _build_request(
        self, builder: OperationBuilder
    ) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
        path_names = path_param_names(builder.path)
        parameters: list[dict[str, Any]] = []
        seen: set[tuple[str, str]] = set()
        content: dict[str, Any] = {}
        description: str | None = None

        for entry in builder.requests:
            if entry.structure is None:
                continue
            info = self._reflector.request_info(entry.structure)
            for param in info.parameters:
                if param.location == "path" and param.name not in path_names:
                    msg = (
                        f"{builder.key}: path parameter {param.name!r} "
                        "is declared but missing from the path"
                    )
                    raise PathError(msg)
                if (param.name, param.location) in seen:
                    continue
                seen.add((param.name, param.location))
                parameters.append(param.to_dict())
            if info.body is not None:
                content[entry.content_type] = {"schema": info.body}
                description = description or entry.description

        # Undeclared path parameters are still required strings
        for name in path_names:
            if (name, "path") in seen:
                continue
            converter = builder.converters.get(name, "str")
            parameters.append(
                {
                    "name": name,
                    "in": "path",
                    "required": True,
                    "schema": dict(_CONVERTER_SCHEMAS.get(converter, {"type": "string"})),
                }
            )

        if not content:
            return parameters, None
        body: dict[str, Any] = {}
        if description:
            body["description"] = description
        body["content"] = content
        body["required"] = True
        return parameters, body

    def _build_responses(self, responses: list[Content]) -> dict[str, Any]:
        if not responses:
            return {"200": {"description": _status_phrase(200)}}

        result: dict[str, Any] = {}
        for entry in responses:
            status = entry.status or 200
            key = "default" if entry.default else str(status)
            response = result.setdefault(key, {})
            if "description" not in response or entry.description:
                response["description"] = entry.description or (
                    "Default response" if entry.default else _status_phrase(status)
                )
            if entry.structure is not None:
                schema = self._reflector.schema_for(entry.structure)
                response.setdefault("content", {})[entry.content_type] = {"schema": schema}
        return result

    # -- Output --

    def to_dict(self) -> dict[str, Any]:
        """The full description as plain JSON-compatible data."""
        config = self._config
        info: dict[str, Any] = {"title": config.title}
        if config.description:
            info["description"] = config.description
        if config.terms_of_service:
            info["termsOfService"] = config.terms_of_service
        if config.contact is not None:
            info["contact"] = config.contact.to_dict()
        if config.license is not None:
            info["license"] = config.license.to_dict()
        info["version"] = config.version

        doc: dict[str, Any] = {"openapi": config.openapi_version, "info": info}
        if config.servers:
            doc["servers"] = [server.to_dict() for server in config.servers]
        if config.tags:
            doc["tags"] = [tag.to_dict() for tag in config.tags]
        if config.external_docs is not None:
            doc["externalDocs"] = config.external_docs.to_dict()
        doc["paths"] = self.paths

        components: dict[str, Any] = {}
        definitions = self._reflector.definitions
        if definitions:
            components["schemas"] = definitions
        if config.security_schemes:
            components["securitySchemes"] = {
                name: scheme.to_dict() for name, scheme in config.security_schemes.items()
            }
        if components:
            doc["components"] = components
        return doc

    def serialize(self, format: str = "yaml") -> bytes:
        """Encode the description as ``json``, ``yaml`` or ``yml``.

        Raises ``ValueError`` for any other format.
        """
        fmt = format.lower()
        if fmt == "json":
            return json.dumps(self.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")
        if fmt in ("yaml", "yml"):
            text = yaml.dump(
                self.to_dict(),
                Dumper=_NoAliasDumper,
                sort_keys=False,
                allow_unicode=True,
            )
            return text.encode("utf-8")
        msg = f"Unsupported schema format {format!r}. Use one of: {', '.join(SERIALIZE_FORMATS)}"
        raise ValueError(msg)
