"""Tests for wren.app: the native ASGI host."""

import pytest

from wren import App, AppConfig, HostScope, NotFound, Request, Response
from wren.middleware import Next
from wren.testing import TestClient


class TestRegistration:
    def test_route_decorator(self) -> None:
        app = App()

        @app.route("/users/{id:int}", methods=["get", "post"], name="user")
        def user(id: int):
            return {"id": id}

        (route,) = app.routes
        assert route.methods == frozenset({"GET", "POST"})
        assert route.name == "user"
        assert route.handler is user

    def test_is_host_scope(self) -> None:
        app = App()
        assert isinstance(app, HostScope)
        assert isinstance(app.sub_scope("/x"), HostScope)
        assert "CONNECT" in app.methods

    def test_register_handler_normalizes_path(self) -> None:
        route = App().register_handler("get", "pets/", lambda: "ok")
        assert route.path == "/pets"
        assert route.methods == frozenset({"GET"})

    def test_sub_scope_stacks_prefix_and_middleware(self) -> None:
        async def a(request: Request, next: Next) -> Response:
            return await next(request)

        async def b(request: Request, next: Next) -> Response:
            return await next(request)

        app = App()
        route = app.sub_scope("/api", [a]).sub_scope("/v1", [b]).register_handler(
            "GET", "/pets", lambda: "ok"
        )
        assert route.path == "/api/v1/pets"
        assert route.middleware == (a, b)

    @pytest.mark.asyncio
    async def test_frozen_after_first_request(self) -> None:
        app = App()
        app.register_handler("GET", "/", lambda: "ok")
        async with TestClient(app) as client:
            await client.get("/")
        with pytest.raises(RuntimeError, match="Cannot modify the app"):
            app.register_handler("GET", "/late", lambda: "late")
        with pytest.raises(RuntimeError):
            app.add_middleware(lambda request, next: next(request))


class TestDispatch:
    @pytest.mark.asyncio
    async def test_return_types(self) -> None:
        app = App()
        app.register_handler("GET", "/text", lambda: "<p>hi</p>")
        app.register_handler("GET", "/json", lambda: {"ok": True})
        app.register_handler("GET", "/empty", lambda: None)
        app.register_handler("GET", "/created", lambda: ({"id": 1}, 201))

        async with TestClient(app) as client:
            text = await client.get("/text")
            data = await client.get("/json")
            empty = await client.get("/empty")
            created = await client.get("/created")

        assert text.content_type.startswith("text/html")
        assert data.text == '{"ok": true}'
        assert empty.status == 204
        assert created.status == 201

    @pytest.mark.asyncio
    async def test_path_params_converted(self) -> None:
        app = App()
        seen: dict = {}

        def by_converter(id):
            seen["converter"] = id
            return "ok"

        def by_annotation(pet_id: int):
            seen["annotation"] = pet_id
            return "ok"

        def raw(name: str):
            seen["raw"] = name
            return "ok"

        app.register_handler("GET", "/a/{id:int}", by_converter)
        app.register_handler("GET", "/b/:pet_id", by_annotation)
        app.register_handler("GET", "/c/{name}", raw)

        async with TestClient(app) as client:
            await client.get("/a/7")
            await client.get("/b/42")
            await client.get("/c/rex")

        assert seen == {"converter": 7, "annotation": 42, "raw": "rex"}

    @pytest.mark.asyncio
    async def test_request_injected(self) -> None:
        app = App()

        async def echo(request: Request):
            body = await request.json()
            return {"method": request.method, "q": request.query.get("q"), "body": body}

        app.register_handler("POST", "/echo", echo)

        async with TestClient(app) as client:
            response = await client.post("/echo?q=search", json={"a": 1})

        assert response.status == 200
        assert response.text == '{"method": "POST", "q": "search", "body": {"a": 1}}'

    @pytest.mark.asyncio
    async def test_not_found_and_method_not_allowed(self) -> None:
        app = App()
        app.register_handler("POST", "/pets", lambda: "ok")

        async with TestClient(app) as client:
            missing = await client.get("/nope")
            wrong = await client.get("/pets")

        assert missing.status == 404
        assert wrong.status == 405
        assert wrong.header("allow") == "POST"

    @pytest.mark.asyncio
    async def test_head_has_no_body(self) -> None:
        app = App()
        app.register_handler("GET", "/pets", lambda: "hello")

        async with TestClient(app) as client:
            response = await client.head("/pets")

        assert response.status == 200
        assert response.body == b""


class TestMiddleware:
    @pytest.mark.asyncio
    async def test_order(self) -> None:
        calls: list[str] = []

        def tracer(name: str):
            async def mw(request: Request, next: Next) -> Response:
                calls.append(f"{name}:in")
                response = await next(request)
                calls.append(f"{name}:out")
                return response

            return mw

        app = App()
        app.add_middleware(tracer("app"))
        scope = app.sub_scope("/api", [tracer("group")])
        scope.sub_scope("", [tracer("route")]).register_handler(
            "GET", "/x", lambda: calls.append("handler") or "ok"
        )

        async with TestClient(app) as client:
            await client.get("/api/x")

        assert calls == [
            "app:in",
            "group:in",
            "route:in",
            "handler",
            "route:out",
            "group:out",
            "app:out",
        ]

    @pytest.mark.asyncio
    async def test_short_circuit(self) -> None:
        async def deny(request: Request, next: Next) -> Response:
            return Response("denied", status=401)

        app = App()
        app.sub_scope("/admin", [deny]).register_handler("GET", "/stats", lambda: "secret")
        app.register_handler("GET", "/public", lambda: "public")

        async with TestClient(app) as client:
            admin = await client.get("/admin/stats")
            public = await client.get("/public")

        assert admin.status == 401
        assert public.text == "public"


class TestErrorHandlers:
    @pytest.mark.asyncio
    async def test_status_handler(self) -> None:
        app = App()

        @app.error(404)
        def not_found(request: Request):
            return {"missing": request.path}

        async with TestClient(app) as client:
            response = await client.get("/nope")

        assert response.status == 404
        assert response.text == '{"missing": "/nope"}'

    @pytest.mark.asyncio
    async def test_raised_http_error(self) -> None:
        app = App()

        def handler():
            raise NotFound("no such pet")

        app.register_handler("GET", "/pets/1", handler)

        async with TestClient(app) as client:
            response = await client.get("/pets/1")

        assert response.status == 404
        assert response.text == "no such pet"

    @pytest.mark.asyncio
    async def test_internal_error(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App()

        def boom():
            raise KeyError("boom")

        app.register_handler("GET", "/boom", boom)

        async with TestClient(app) as client:
            response = await client.get("/boom")

        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert any(r.name == "wren.server" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_debug_traceback(self) -> None:
        app = App(AppConfig(debug=True))

        def boom():
            raise ValueError("kaput")

        app.register_handler("GET", "/boom", boom)

        async with TestClient(app) as client:
            response = await client.get("/boom")

        assert response.status == 500
        assert "ValueError: kaput" in response.text

    @pytest.mark.asyncio
    async def test_exception_type_handler(self) -> None:
        app = App()

        @app.error(ValueError)
        def bad_value(request: Request, exc: Exception):
            return f"bad: {exc}", 422

        def handler():
            raise ValueError("nope")

        app.register_handler("GET", "/v", handler)

        async with TestClient(app) as client:
            response = await client.get("/v")

        assert response.status == 422
        assert response.text == "bad: nope"


class TestLifespan:
    @pytest.mark.asyncio
    async def test_hooks_run(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def start():
            events.append("start")

        @app.on_shutdown
        def stop():
            events.append("stop")

        async with TestClient(app):
            assert events == ["start"]
        assert events == ["start", "stop"]

    @pytest.mark.asyncio
    async def test_lifespan_protocol(self) -> None:
        app = App()
        app.on_startup(lambda: None)
        messages = iter(
            [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        )
        sent: list[dict] = []

        async def receive():
            return next(messages)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
