"""Segment trie router for the native host.

Routes are collected during setup. ``compile()`` builds the trie once the
app freezes; ``match()`` walks it with literal segments tried before
parameters and parameters before a trailing ``{name:path}`` catch-all.
"""

import re

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.routing.params import CONVERTERS, normalize_path
from wren.routing.route import HostRoute, PathSegment, RouteMatch

_ANGLE_PARAM_RE = re.compile(r"<[^>]+>")
_PARAM_SEGMENT_RE = re.compile(r"^\{([^{}:]+)(?::([^{}]+))?\}$")

# Method → (route, the route's own parameter names in path order)
type _Methods = dict[str, tuple[HostRoute, tuple[str, ...]]]

# (method map, captured values in path order) for a matched path
type _Found = tuple[_Methods, list[str]]




def parse_path(path: str) -> list[PathSegment]:
    """Split *path* into segments.

    ``{id}``, ``{id:int}`` and ``:id`` are all accepted::

        parse_path("/users/:id/files/{rest:path}")
        -> [PathSegment("users"), PathSegment("{id}", "id"),
            PathSegment("files"), PathSegment("{rest:path}", "rest", "path")]

    Raises ``ConfigurationError`` for ``<param>`` syntax, unknown
    converters, and a catch-all that is not the last segment.
    """
    if _ANGLE_PARAM_RE.search(path):
        msg = (
            f"Route path {path!r} uses <param> syntax. "
            "Use {param} or :param for path parameters."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in filter(None, normalize_path(path).split("/")):
        if segments and segments[-1].is_catch_all:
            msg = f"Catch-all parameter must be the last segment of {path!r}"
            raise ConfigurationError(msg)
        found = _PARAM_SEGMENT_RE.match(part)
        if found is None:
            segments.append(PathSegment(part))
            continue
        name, converter = found.group(1), found.group(2) or "str"
        if converter not in CONVERTERS:
            msg = (
                f"Unknown converter {converter!r} in route path {path!r}. "
                f"Known converters: {', '.join(sorted(CONVERTERS))}"
            )
            raise ConfigurationError(msg)
        segments.append(PathSegment(part, name, converter))
    return segments


class _Node:
    __slots__ = ("catch_all", "literal", "methods", "params")

    def __init__(self) -> None:
        self.literal: dict[str, _Node] = {}
        # One edge per converter; names live on the terminal routes
        self.params: dict[str, tuple[re.Pattern[str], _Node]] = {}
        self.catch_all: _Methods = {}
        self.methods: _Methods = {}

    def insert(self, route: HostRoute, segments: list[PathSegment]) -> None:
        names = tuple(s.param for s in segments if s.param is not None)
        entry = dict.fromkeys(route.methods, (route, names))
        node = self
        for segment in segments:
            if segment.is_catch_all:
                node.catch_all.update(entry)
                return
            node = node._child(segment)
        node.methods.update(entry)

    def _child(self, segment: PathSegment) -> "_Node":
        if segment.param is None:
            return self.literal.setdefault(segment.text, _Node())
        if segment.converter not in self.params:
            pattern, _ = CONVERTERS[segment.converter]
            self.params[segment.converter] = (re.compile(pattern), _Node())
            # Typed converters are tried before the catch-any "str"
            if "str" in self.params:
                self.params["str"] = self.params.pop("str")
        return self.params[segment.converter][1]


def _lookup(node: _Node, parts: list[str], index: int, values: list[str]) -> _Found | None:
    if index == len(parts):
        return (node.methods, values) if node.methods else None

    part = parts[index]
    literal = node.literal.get(part)
    if literal is not None:
        found = _lookup(literal, parts, index + 1, values)
        if found is not None:
            return found

    for regex, child in node.params.values():
        if regex.fullmatch(part):
            found = _lookup(child, parts, index + 1, [*values, part])
            if found is not None:
                return found

    if node.catch_all:
        return node.catch_all, [*values, "/".join(parts[index:])]
    return None


class Router:
    """Method-aware path lookup.

    ::

        router = Router()
        router.add(HostRoute("/users/:id", handler, frozenset({"GET"})))
        router.compile()
        router.match("GET", "/users/42").path_params  # {"id": "42"}
    """

    __slots__ = ("_pending", "_root")

    def __init__(self) -> None:
        self._pending: list[tuple[HostRoute, list[PathSegment]]] = []
        self._root: _Node | None = None

    def add(self, route: HostRoute) -> None:
        """Queue *route*. Its path is parsed now so bad paths fail early."""
        if self._root is not None:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._pending.append((route, parse_path(route.path)))

    @property
    def routes(self) -> list[HostRoute]:
        """All registered routes, in registration order."""
        return [route for route, _ in self._pending]

    def compile(self) -> None:
        """Build the trie. Later registrations are rejected."""
        root = _Node()
        for route, segments in self._pending:
            root.insert(route, segments)
        self._root = root

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the route for *method* on *path*.

        HEAD falls back to GET. Raises ``NotFound`` when no path matches
        and ``MethodNotAllowed`` when the path matches other methods only.
        """
        if self._root is None:
            msg = "Router.match() called before compile()."
            raise RuntimeError(msg)

        found = _lookup(self._root, [p for p in path.split("/") if p], 0, [])
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")

        by_method, values = found
        entry = by_method.get(method)
        if entry is None and method == "HEAD":
            entry = by_method.get("GET")
        if entry is None:
            raise MethodNotAllowed(frozenset(by_method))
        route, names = entry
        return RouteMatch(route=route, path_params=dict(zip(names, values, strict=True)))
