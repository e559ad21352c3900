"""Configuration.

OpenAPIConfig and AppConfig are frozen dataclasses: immutable after
creation, IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from wren.openapi.entities import (
    Contact,
    ExternalDocs,
    License,
    SecurityScheme,
    Server,
    Tag,
)
from wren.routing.params import PathParser, join_path

UIProvider = Literal["swagger-ui", "redoc", "stoplight"]


@dataclass(frozen=True, slots=True)
class UIConfig:
    """Documentation page settings.

    ``provider`` picks the renderer. The remaining fields only apply to
    Swagger UI and are ignored by the others.
    """

    provider: UIProvider = "swagger-ui"
    cdn_version: str | None = None
    deep_linking: bool = True
    doc_expansion: Literal["list", "full", "none"] = "list"
    display_request_duration: bool = False
    persist_authorization: bool = False
    extra_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ReflectorConfig:
    """Schema reflection settings.

    ``type_mappings`` replaces the schema of a Python type wholesale, for
    types the reflector does not know (``{IPv4Address: {"type": "string",
    "format": "ipv4"}}``).
    """

    inline_refs: bool = False
    strip_def_name_prefix: tuple[str, ...] = ()
    type_mappings: Mapping[type, Mapping[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class OpenAPIConfig:
    """API description settings. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = OpenAPIConfig(
            title="Petstore",
            version="2.0.0",
            security_schemes={"bearerAuth": SecurityScheme.http_bearer("JWT")},
        )
    """

    # Document
    openapi_version: str = "3.1.0"
    title: str = "wren API"
    version: str = "1.0.0"
    description: str | None = None
    terms_of_service: str | None = None
    contact: Contact | None = None
    license: License | None = None
    servers: tuple[Server, ...] = ()
    security_schemes: Mapping[str, SecurityScheme] = field(default_factory=dict)
    tags: tuple[Tag, ...] = ()
    external_docs: ExternalDocs | None = None

    # Switches
    disable_openapi: bool = False
    disable_docs: bool = False

    # Serving
    docs_path: str = "/docs"
    spec_path: str | None = None  # None = "<docs_path>/openapi.yaml"
    base_url: str = ""
    ui: UIConfig = field(default_factory=UIConfig)

    # Building
    path_parser: PathParser | None = None
    reflector: ReflectorConfig = field(default_factory=ReflectorConfig)

    @property
    def resolved_spec_path(self) -> str:
        """The path the schema file is served from."""
        if self.spec_path:
            return self.spec_path
        return join_path(self.docs_path, "openapi.yaml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Native host configuration. Immutable after creation.

    ::

        config = AppConfig(debug=True, port=3000)
    """

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
