"""Path parameter syntax: normalization, joining, and type conversion.

Routers disagree on how a path parameter is spelled. Wren accepts both the
sigil form (``/pets/:id``) and the brace form (``/pets/{id}``, optionally
typed as ``{id:int}``) and always hands the brace form to the OpenAPI
document.
"""

import posixpath
import re
from typing import Protocol

from wren.errors import PathError

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

# Brace groups are matched first so a converter suffix (``{id:int}``)
# is never mistaken for a sigil parameter.
_SIGIL_RE = re.compile(r"\{[^}]*\}|:([A-Za-z0-9_]+)")
_BRACE_RE = re.compile(r"\{([^{}:]*)(?::([^{}]*))?\}")


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)


def normalize_path(path: str) -> str:
    """Rewrite sigil parameters into brace parameters.

    Examples::

        "/pets/:id"             -> "/pets/{id}"
        ":org/:repo"            -> "{org}/{repo}"
        "/pets/{id}"            -> "/pets/{id}"      (unchanged)
        "/users/{id:int}/:tab"  -> "/users/{id:int}/{tab}"

    A parameter runs from the ``:`` through the longest run of letters,
    digits and underscores. Everything else passes through, which makes
    the function idempotent.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None:
            return match.group(0)
        return "{" + name + "}"

    return _SIGIL_RE.sub(_replace, path)


def join_path(*parts: str) -> str:
    """Join path fragments and clean the result.

    Leading slashes on later fragments do not reset the path (unlike
    ``posixpath.join``). Duplicate slashes collapse, and a trailing slash
    is dropped except for the root::

        join_path("/pet", "/")         -> "/pet"
        join_path("/api/", "/v1//x/")  -> "/api/v1/x"
        join_path("", "")              -> "/"
    """
    joined = "/".join(part.strip("/") for part in parts if part.strip("/"))
    return posixpath.normpath("/" + joined)


def split_converters(path: str) -> tuple[str, dict[str, str]]:
    """Strip converter suffixes from brace parameters.

    Returns the bare path and a mapping of parameter name to converter::

        split_converters("/users/{id:int}/{tab}")
        -> ("/users/{id}/{tab}", {"id": "int", "tab": "str"})
    """
    converters: dict[str, str] = {}

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        converters[name] = match.group(2) or "str"
        return "{" + name + "}"

    return _BRACE_RE.sub(_replace, path), converters


class PathParser(Protocol):
    """Converts a router's native path syntax into brace syntax."""

    def parse(self, path: str) -> str: ...


class ColonParamParser:
    """Default parser: ``/users/:id`` becomes ``/users/{id}``."""

    __slots__ = ()

    def parse(self, path: str) -> str:
        return normalize_path(path)


class ConverterParamParser:
    """Parser for the native host.

    Sigils are normalized like ``ColonParamParser`` and converter
    suffixes (``{id:int}``) are kept for the document to type the
    parameter, but unknown converters are rejected early.
    """

    __slots__ = ()

    def parse(self, path: str) -> str:
        normalized = normalize_path(path)
        _, converters = split_converters(normalized)
        for name, converter in converters.items():
            if converter not in CONVERTERS:
                msg = (
                    f"Unknown converter {converter!r} for parameter {name!r} "
                    f"in path {path!r}"
                )
                raise PathError(msg)
        return normalized
