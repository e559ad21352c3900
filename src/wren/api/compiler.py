"""Route tree compilation and schema output.

Compiling walks the whole tree once, merges inherited metadata into each
visible route's operation, and registers the operations with the
document. Every failure lands in the tree's ``SpecError``; the walk never
stops early and never runs twice.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from wren.errors import ConfigurationError, SchemaError, SpecError, WrenError
from wren.openapi.document import SERIALIZE_FORMATS

if TYPE_CHECKING:
    from wren.api.context import BuildContext
    from wren.api.node import RouterNode

_EXTENSION_FORMATS: dict[str, str] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def compile_tree(context: "BuildContext") -> int:
    """Compile the tree owning *context*. Thread-safe and idempotent.

    Uses the same double-checked lock as the native host's freeze:
    concurrent first callers block until one thread finishes the walk.
    Returns the number of registered operations.
    """
    if context.compiled:
        return context.operation_count
    with context.lock:
        if context.compiled:
            return context.operation_count
        try:
            if context.root is not None and context.document is not None:
                context.operation_count = _walk(context.root, context)
        finally:
            context.compiled = True
        context.logger.debug(
            "compiled %d operation(s), %d error(s)",
            context.operation_count,
            len(context.errors),
        )
    return context.operation_count


def _walk(node: "RouterNode", context: "BuildContext", *, hidden: bool = False) -> int:
    document = context.document
    assert document is not None
    count = 0
    hidden = hidden or node.metadata.hidden

    for route in node.routes:
        builder = route.operation
        if builder is None or route.hidden or hidden:
            continue
        builder.add_tags(*route.inherited.tags, *route.own.tags)
        builder.add_security(*route.inherited.security, *route.own.security)
        try:
            document.register_operation(builder)
        except WrenError as exc:
            context.errors.add(exc)
            continue
        except Exception as exc:
            context.logger.debug("%s → unexpected error", builder.key, exc_info=True)
            context.errors.add(SchemaError(f"{builder.key}: {exc}"))
            continue
        count += 1

    for child in node.children:
        count += _walk(child, context, hidden=hidden)
    return count


def validate(context: "BuildContext") -> SpecError | None:
    """Compile if needed; return the collected errors or ``None``."""
    compile_tree(context)
    if context.errors.has_errors():
        return context.errors
    return None


def generate_schema(context: "BuildContext", format: str = "yaml") -> bytes:
    """Compile if needed and serialize the document.

    Raises ``ConfigurationError`` when the description is disabled,
    ``ValueError`` for an unknown format, and the tree's ``SpecError``
    when anything failed.
    """
    if context.document is None:
        msg = "OpenAPI is disabled. Remove disable_openapi=True to generate a schema."
        raise ConfigurationError(msg)
    if format.lower() not in SERIALIZE_FORMATS:
        msg = f"Unsupported schema format {format!r}. Use one of: {', '.join(SERIALIZE_FORMATS)}"
        raise ValueError(msg)
    err = validate(context)
    if err is not None:
        raise err
    return context.document.serialize(format)


def write_schema_to(context: "BuildContext", path: str | Path) -> Path:
    """Write the document to *path*, picking the format from its extension."""
    target = Path(path)
    fmt = _EXTENSION_FORMATS.get(target.suffix.lower())
    if fmt is None:
        msg = (
            f"Cannot infer schema format from {str(target)!r}. "
            "Use a .json, .yaml or .yml extension."
        )
        raise ValueError(msg)
    target.write_bytes(generate_schema(context, fmt))
    context.logger.info("wrote OpenAPI schema to %s", target)
    return target
