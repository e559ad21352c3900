"""Python type to JSON Schema reflection.

Turns the structures attached to operations (dataclasses, builtins, enums,
literals, containers) into JSON Schema fragments for the OpenAPI document.
Dataclasses become named ``components/schemas`` entries referenced through
``$ref`` unless ``inline_refs`` is set.

Request dataclasses are additionally split into parameters and body: a
field whose metadata carries ``in`` (see ``wren.openapi.params``) becomes a
path, query, header or cookie parameter, everything else stays in the body.
"""

import dataclasses
import datetime
import enum
import types
import typing
import uuid
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Literal, Union, get_args, get_origin

from wren.config import ReflectorConfig
from wren.errors import SchemaError

# Python type → JSON Schema fragment
_TYPE_MAP: dict[type, dict[str, Any]] = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number"},
    bool: {"type": "boolean"},
    bytes: {"type": "string", "format": "binary"},
    Decimal: {"type": "number"},
    datetime.datetime: {"type": "string", "format": "date-time"},
    datetime.date: {"type": "string", "format": "date"},
    datetime.time: {"type": "string", "format": "time"},
    uuid.UUID: {"type": "string", "format": "uuid"},
}

_ARRAY_ORIGINS = (list, set, frozenset, tuple)
_PARAMETER_LOCATIONS = frozenset({"path", "query", "header", "cookie"})
_JSON_SCALARS = (str, int, float, bool)

REF_PREFIX = "#/components/schemas/"


@dataclasses.dataclass(frozen=True, slots=True)
class ParameterInfo:
    """A request parameter extracted from a request dataclass."""

    name: str
    location: str
    required: bool
    schema: dict[str, Any]
    description: str | None = None
    example: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "in": self.location}
        if self.description:
            data["description"] = self.description
        data["required"] = self.required
        data["schema"] = self.schema
        if self.example is not None:
            data["example"] = self.example
        return data


@dataclasses.dataclass(frozen=True, slots=True)
class RequestInfo:
    """A request structure split into parameters and body schema.

    ``body`` is ``None`` when every field is a parameter.
    """

    parameters: tuple[ParameterInfo, ...]
    body: dict[str, Any] | None


class Reflector:
    """Reflects Python types against one document's component registry.

    One reflector lives per ``Document``; named schemas accumulate in
    ``definitions`` as operations register.
    """

    __slots__ = ("_config", "_definitions", "_in_progress", "_names", "_openapi_31")

    def __init__(self, config: ReflectorConfig | None = None, *, openapi_31: bool = True) -> None:
        self._config = config or ReflectorConfig()
        self._openapi_31 = openapi_31
        self._definitions: dict[str, dict[str, Any]] = {}
        self._names: dict[type, str] = {}
        self._in_progress: set[type] = set()

    @property
    def definitions(self) -> dict[str, dict[str, Any]]:
        """Named schemas collected so far, in registration order."""
        return dict(self._definitions)

    # -- Public entry points --

    def schema_for(self, annotation: Any) -> dict[str, Any]:
        """Return the JSON Schema fragment for *annotation*.

        Raises ``SchemaError`` if the type cannot be reflected.
        """
        mapped = _lookup(self._config.type_mappings, annotation)
        if mapped is not None:
            return dict(mapped)

        if get_origin(annotation) is typing.Annotated:
            return self.schema_for(get_args(annotation)[0])

        if annotation is Any or annotation is object:
            return {}

        if annotation is type(None):
            return {"type": "null"} if self._openapi_31 else {"nullable": True}

        if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
            return self._enum_schema([member.value for member in annotation])

        builtin = _lookup(_TYPE_MAP, annotation)
        if builtin is not None:
            return dict(builtin)

        if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
            return self._dataclass_schema(annotation)

        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin is Union or origin is types.UnionType:
            return self._union_schema(args)

        if origin is Literal:
            return self._enum_schema(list(args))

        if annotation in _ARRAY_ORIGINS or origin in _ARRAY_ORIGINS:
            return self._array_schema(origin or annotation, args)

        if annotation is dict or origin in (dict, Mapping):
            return self._mapping_schema(annotation, args)

        name = getattr(annotation, "__name__", repr(annotation))
        msg = f"Cannot reflect type {name!r} to JSON Schema"
        raise SchemaError(msg)

    def request_info(self, structure: Any) -> RequestInfo:
        """Split a request structure into parameters and body schema."""
        if not (isinstance(structure, type) and dataclasses.is_dataclass(structure)):
            return RequestInfo(parameters=(), body=self.schema_for(structure))

        hints = _type_hints(structure)
        fields = dataclasses.fields(structure)
        param_fields = [f for f in fields if f.metadata.get("in") in _PARAMETER_LOCATIONS]

        # Plain body dataclasses keep their named component
        if not param_fields:
            return RequestInfo(parameters=(), body=self._dataclass_schema(structure))

        parameters = []
        for f in param_fields:
            location = f.metadata["in"]
            annotation = hints.get(f.name, f.type)
            schema = self.schema_for(annotation)
            parameters.append(
                ParameterInfo(
                    name=f.metadata.get("name") or f.name,
                    location=location,
                    required=location == "path" or _is_required(f),
                    schema=schema,
                    description=f.metadata.get("description"),
                    example=f.metadata.get("example"),
                )
            )

        body_fields = [f for f in fields if f not in param_fields]
        body = self._object_schema(body_fields, hints) if body_fields else None
        return RequestInfo(parameters=tuple(parameters), body=body)

    # -- Builders --

    def _dataclass_schema(self, cls: type) -> dict[str, Any]:
        if self._config.inline_refs and cls not in self._in_progress:
            self._in_progress.add(cls)
            try:
                return self._object_schema(dataclasses.fields(cls), _type_hints(cls), cls)
            finally:
                self._in_progress.discard(cls)

        name = self._names.get(cls)
        if name is None:
            name = self._definition_name(cls)
            self._names[cls] = name
            # Reserve the slot first so recursive references resolve
            self._definitions[name] = {}
            self._in_progress.add(cls)
            try:
                self._definitions[name] = self._object_schema(
                    dataclasses.fields(cls), _type_hints(cls), cls
                )
            except Exception:
                del self._definitions[name]
                del self._names[cls]
                raise
            finally:
                self._in_progress.discard(cls)
        return {"$ref": REF_PREFIX + name}

    def _object_schema(
        self,
        fields: "Iterable[dataclasses.Field[Any]]",
        hints: dict[str, Any],
        owner: type | None = None,
    ) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        required: list[str] = []
        for f in fields:
            name = f.metadata.get("name") or f.name
            try:
                properties[name] = self._field_schema(f, hints.get(f.name, f.type))
            except SchemaError as exc:
                if owner is None:
                    raise
                msg = f"{owner.__name__}.{f.name}: {exc}"
                raise SchemaError(msg) from exc
            if _is_required(f):
                required.append(name)

        schema: dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        if owner is not None and owner.__doc__ and not _is_generated_doc(owner):
            schema["description"] = owner.__doc__.strip()
        return schema

    def _field_schema(self, f: "dataclasses.Field[Any]", annotation: Any) -> dict[str, Any]:
        schema = self.schema_for(annotation)
        meta = f.metadata
        extras: dict[str, Any] = {}
        if meta.get("description"):
            extras["description"] = meta["description"]
        if meta.get("format"):
            extras["format"] = meta["format"]
        if meta.get("example") is not None:
            extras["example"] = meta["example"]
        default = _json_default(f)
        if default is not dataclasses.MISSING:
            extras["default"] = default
        if not extras:
            return schema
        if "$ref" in schema:
            # Siblings of $ref are ignored before 3.1
            if self._openapi_31:
                return {**schema, **extras}
            return {"allOf": [schema], **extras}
        return {**schema, **extras}

    def _union_schema(self, args: tuple[Any, ...]) -> dict[str, Any]:
        non_none = [a for a in args if a is not type(None)]
        nullable = len(non_none) != len(args)

        if len(non_none) == 1:
            base = self.schema_for(non_none[0])
        else:
            base = {"anyOf": [self.schema_for(a) for a in non_none]}

        if not nullable:
            return base
        return self._nullable(base)

    def _nullable(self, schema: dict[str, Any]) -> dict[str, Any]:
        if not self._openapi_31:
            if "$ref" in schema:
                return {"allOf": [schema], "nullable": True}
            return {**schema, "nullable": True}

        if "anyOf" in schema:
            return {**schema, "anyOf": [*schema["anyOf"], {"type": "null"}]}
        kind = schema.get("type")
        if isinstance(kind, str):
            result = {**schema, "type": [kind, "null"]}
            if "enum" in result:
                result["enum"] = [*result["enum"], None]
            return result
        return {"anyOf": [schema, {"type": "null"}]}

    def _enum_schema(self, values: list[Any]) -> dict[str, Any]:
        schema: dict[str, Any] = {}
        kinds = {type(v) for v in values}
        if len(kinds) == 1:
            (kind,) = kinds
            for py_type in (bool, int, float, str):
                if issubclass(kind, py_type):
                    schema["type"] = _TYPE_MAP[py_type]["type"]
                    break
        schema["enum"] = [v.value if isinstance(v, enum.Enum) else v for v in values]
        return schema

    def _array_schema(self, container: Any, args: tuple[Any, ...]) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "array"}
        if container is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
            # Fixed-length tuple
            items = [self.schema_for(a) for a in args]
            if self._openapi_31:
                schema["prefixItems"] = items
            else:
                schema["items"] = items[0] if len(items) == 1 else {"anyOf": items}
            schema["minItems"] = len(items)
            schema["maxItems"] = len(items)
            return schema

        schema["items"] = self.schema_for(args[0]) if args else {}
        if container in (set, frozenset):
            schema["uniqueItems"] = True
        return schema

    def _mapping_schema(self, annotation: Any, args: tuple[Any, ...]) -> dict[str, Any]:
        if not args:
            return {"type": "object"}
        key_type, value_type = args
        if key_type is not str and key_type is not Any:
            msg = f"Cannot reflect mapping {annotation!r}: JSON object keys must be strings"
            raise SchemaError(msg)
        return {"type": "object", "additionalProperties": self.schema_for(value_type)}

    def _definition_name(self, cls: type) -> str:
        name = cls.__name__
        for prefix in self._config.strip_def_name_prefix:
            if prefix and name.startswith(prefix) and len(name) > len(prefix):
                name = name[len(prefix) :]
                break
        candidate = name
        counter = 2
        while candidate in self._definitions:
            candidate = f"{name}{counter}"
            counter += 1
        return candidate


def _lookup(table: Mapping[Any, Mapping[str, Any]], annotation: Any) -> Mapping[str, Any] | None:
    """``table[annotation]``, or ``None`` when missing or unhashable."""
    try:
        return table.get(annotation)
    except TypeError:
        return None


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolve string annotations (``from __future__ import annotations``)."""
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except NameError as exc:
        msg = f"Cannot resolve annotations of {cls.__name__}: {exc}"
        raise SchemaError(msg) from exc


def _is_required(f: "dataclasses.Field[Any]") -> bool:
    return f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING


def _json_default(f: "dataclasses.Field[Any]") -> Any:
    """The field default if it is a JSON scalar, else ``MISSING``."""
    value = f.default
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, _JSON_SCALARS):
        return value
    return dataclasses.MISSING


def _is_generated_doc(cls: type) -> bool:
    """dataclass() synthesizes ``Name(field: type, ...)`` docstrings."""
    doc = cls.__doc__ or ""
    return doc.startswith(f"{cls.__name__}(")
