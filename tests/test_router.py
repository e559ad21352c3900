"""Tests for wren.routing.router: native trie router."""

import pytest

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.routing.route import HostRoute
from wren.routing.router import Router, parse_path


def _handler() -> str:
    return "ok"


def _route(path: str, methods: frozenset[str] | None = None) -> HostRoute:
    return HostRoute(path=path, handler=_handler, methods=methods or frozenset({"GET"}))


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/api/v2/users")
        assert [s.text for s in segments] == ["api", "v2", "users"]

    def test_brace_param(self) -> None:
        segments = parse_path("/users/{id}")
        assert segments[1].is_param is True
        assert segments[1].param == "id"
        assert segments[1].converter == "str"

    def test_sigil_param(self) -> None:
        segments = parse_path("/users/:id")
        assert segments[1].is_param is True
        assert segments[1].param == "id"

    def test_typed_param(self) -> None:
        assert parse_path("/users/{id:int}")[1].converter == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_angle_param(self) -> None:
        with pytest.raises(ConfigurationError, match="<param>"):
            parse_path("/share/<slug>")

    def test_catch_all_must_be_last(self) -> None:
        with pytest.raises(ConfigurationError, match="last segment"):
            parse_path("/files/{rest:path}/edit")

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="uuid"):
            parse_path("/users/{id:uuid}")


class TestRouterMatch:
    def _router(self, *routes: HostRoute) -> Router:
        router = Router()
        for route in routes:
            router.add(route)
        router.compile()
        return router

    def test_static(self) -> None:
        router = self._router(_route("/users"))
        match = router.match("GET", "/users")
        assert match.route.path == "/users"
        assert match.path_params == {}

    def test_sigil_param(self) -> None:
        router = self._router(_route("/pet/:petId"))
        match = router.match("GET", "/pet/42")
        assert match.path_params == {"petId": "42"}

    def test_static_beats_param(self) -> None:
        router = self._router(_route("/users/{id}"), _route("/users/me"))
        assert router.match("GET", "/users/me").route.path == "/users/me"
        assert router.match("GET", "/users/7").route.path == "/users/{id}"

    def test_int_converter_rejects_text(self) -> None:
        router = self._router(_route("/items/{id:int}"))
        with pytest.raises(NotFound):
            router.match("GET", "/items/abc")

    def test_catch_all(self) -> None:
        router = self._router(_route("/files/{path:path}"))
        assert router.match("GET", "/files/a/b/c.txt").path_params == {"path": "a/b/c.txt"}

    def test_method_not_allowed(self) -> None:
        router = self._router(_route("/users", frozenset({"POST"})))
        with pytest.raises(MethodNotAllowed) as exc_info:
            router.match("GET", "/users")
        assert ("Allow", "POST") in exc_info.value.headers

    def test_head_falls_back_to_get(self) -> None:
        router = self._router(_route("/users"))
        assert router.match("HEAD", "/users").route.path == "/users"

    def test_not_found(self) -> None:
        router = self._router(_route("/users"))
        with pytest.raises(NotFound):
            router.match("GET", "/nope")

    def test_match_before_compile(self) -> None:
        router = Router()
        router.add(_route("/users"))
        with pytest.raises(RuntimeError, match="before compile"):
            router.match("GET", "/users")

    def test_routes_in_registration_order(self) -> None:
        router = self._router(_route("/b"), _route("/a"))
        assert [r.path for r in router.routes] == ["/b", "/a"]

    def test_add_after_compile(self) -> None:
        router = self._router(_route("/users"))
        with pytest.raises(RuntimeError, match="after compilation"):
            router.add(_route("/late"))


class TestSiblingParameters:
    def _router(self, *routes: HostRoute) -> Router:
        router = Router()
        for route in routes:
            router.add(route)
        router.compile()
        return router

    def test_each_route_keeps_its_own_names(self) -> None:
        router = self._router(_route("/users/{id:int}"), _route("/users/:user_id/posts"))
        assert router.match("GET", "/users/42").path_params == {"id": "42"}
        assert router.match("GET", "/users/42/posts").path_params == {"user_id": "42"}

    def test_untyped_sibling_accepts_text(self) -> None:
        router = self._router(_route("/users/{id:int}"), _route("/users/:user_id/posts"))
        match = router.match("GET", "/users/bob/posts")
        assert match.route.path == "/users/:user_id/posts"
        assert match.path_params == {"user_id": "bob"}
        with pytest.raises(NotFound):
            router.match("GET", "/users/bob")

    def test_typed_edge_tried_before_str(self) -> None:
        router = self._router(_route("/items/{slug}"), _route("/items/{id:int}"))
        assert router.match("GET", "/items/7").route.path == "/items/{id:int}"
        assert router.match("GET", "/items/seven").route.path == "/items/{slug}"

    def test_methods_on_same_path_with_different_names(self) -> None:
        router = self._router(
            _route("/pets/{pet_id}", frozenset({"GET"})),
            _route("/pets/{id}", frozenset({"DELETE"})),
        )
        assert router.match("GET", "/pets/3").path_params == {"pet_id": "3"}
        assert router.match("DELETE", "/pets/3").path_params == {"id": "3"}

    def test_catch_all_named_per_route(self) -> None:
        router = self._router(_route("/repos/{owner}/{rest:path}"))
        assert router.match("GET", "/repos/acme/src/main.py").path_params == {
            "owner": "acme",
            "rest": "src/main.py",
        }
