"""Path syntax helpers and the native host's trie router."""

from wren.routing.params import (
    ColonParamParser,
    ConverterParamParser,
    PathParser,
    join_path,
    normalize_path,
    split_converters,
)
from wren.routing.route import HostRoute, RouteMatch
from wren.routing.router import Router

__all__ = [
    "ColonParamParser",
    "ConverterParamParser",
    "HostRoute",
    "PathParser",
    "RouteMatch",
    "Router",
    "join_path",
    "normalize_path",
    "split_converters",
]
