"""wren: declare HTTP routes once, get routing and an OpenAPI description.

Routes registered through an ``APIRouter`` are served by the host (the
native ``App`` or Starlette) and documented in an OpenAPI 3.0/3.1 document,
with a documentation page at ``/docs``.

Basic usage::

    from wren import APIRouter, App, OpenAPIConfig

    app = App()
    api = APIRouter(app, OpenAPIConfig(title="Petstore", version="1.0.0"))

    def get_pet(pet_id: int):
        return {"id": pet_id, "name": "Rex"}

    api.get("/pets/:pet_id", get_pet).with_(operation_id="getPet", response=Pet)

    api.write_schema_to("openapi.yaml")

Starlette (``pip install wren[starlette]``)::

    from wren.adapters.starlette import StarletteScope
    api = APIRouter(StarletteScope(starlette_app.router))
"""

__version__ = "0.1.0"
__all__ = [
    "APIRouter",
    "App",
    "AppConfig",
    "BoundRoute",
    "ConfigurationError",
    "Content",
    "HTTPError",
    "HostScope",
    "MethodNotAllowed",
    "NotFound",
    "OpenAPIConfig",
    "OperationError",
    "PathError",
    "Request",
    "Response",
    "Route",
    "RouterNode",
    "SchemaError",
    "SecurityRequirement",
    "SecurityScheme",
    "SpecError",
    "UIConfig",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name in ("APIRouter", "BoundRoute"):
        from wren import binding as _binding

        return getattr(_binding, name)

    if name in ("AppConfig", "OpenAPIConfig", "UIConfig"):
        from wren import config as _config

        return getattr(_config, name)

    if name in ("Route", "RouterNode"):
        from wren import api as _api

        return getattr(_api, name)

    if name == "HostScope":
        from wren.host import HostScope

        return HostScope

    if name in ("Content", "SecurityRequirement", "SecurityScheme"):
        from wren import openapi as _openapi

        return getattr(_openapi, name)

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "OperationError",
        "PathError",
        "SchemaError",
        "SpecError",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
