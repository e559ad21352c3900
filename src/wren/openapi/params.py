"""Field helpers for request and response dataclasses.

Each helper returns a ``dataclasses.field`` carrying the metadata the
reflector reads::

    @dataclass
    class GetPet:
        pet_id: int = path(name="petId", description="ID of pet to return")
        expand: bool = query(default=False)
        trace_id: str | None = header(name="X-Trace-Id", default=None)

A field without a location stays in the request body.
"""

import dataclasses
from typing import Any

_MISSING: Any = dataclasses.MISSING


def _field(
    location: str | None,
    *,
    name: str | None,
    description: str | None,
    format: str | None,
    example: Any,
    default: Any,
    default_factory: Any,
) -> Any:
    metadata: dict[str, Any] = {}
    if location is not None:
        metadata["in"] = location
    if name is not None:
        metadata["name"] = name
    if description is not None:
        metadata["description"] = description
    if format is not None:
        metadata["format"] = format
    if example is not None:
        metadata["example"] = example
    if default_factory is not _MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


def path(
    *,
    name: str | None = None,
    description: str | None = None,
    format: str | None = None,
    example: Any = None,
) -> Any:
    """A path parameter. Always required, so it takes no default."""
    return _field(
        "path",
        name=name,
        description=description,
        format=format,
        example=example,
        default=_MISSING,
        default_factory=_MISSING,
    )


def query(
    *,
    name: str | None = None,
    description: str | None = None,
    format: str | None = None,
    example: Any = None,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    return _field(
        "query",
        name=name,
        description=description,
        format=format,
        example=example,
        default=default,
        default_factory=default_factory,
    )


def header(
    *,
    name: str | None = None,
    description: str | None = None,
    format: str | None = None,
    example: Any = None,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    return _field(
        "header",
        name=name,
        description=description,
        format=format,
        example=example,
        default=default,
        default_factory=default_factory,
    )


def cookie(
    *,
    name: str | None = None,
    description: str | None = None,
    format: str | None = None,
    example: Any = None,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    return _field(
        "cookie",
        name=name,
        description=description,
        format=format,
        example=example,
        default=default,
        default_factory=default_factory,
    )


def body_field(
    *,
    name: str | None = None,
    description: str | None = None,
    format: str | None = None,
    example: Any = None,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    """A body property with documentation metadata (``name`` renames the JSON key)."""
    return _field(
        None,
        name=name,
        description=description,
        format=format,
        example=example,
        default=default,
        default_factory=default_factory,
    )
