"""Documentation page and spec file handlers.

Both handlers are plain callables taking the request and returning a wren
``Response``, so any host can mount them: the native ``App`` calls them
directly and the Starlette adapter converts the response.

The page itself is a kida template (``pip install wren[docs]``) that loads
Swagger UI, Redoc or Stoplight Elements from a CDN and points it at the
spec file.
"""

import html
import json
import logging
import threading
from collections.abc import Callable
from typing import Any

from wren.config import OpenAPIConfig
from wren.docs import templates
from wren.errors import ConfigurationError
from wren.http.response import Response

logger = logging.getLogger("wren.openapi")

# provider → (template source, default CDN base)
_PROVIDERS: dict[str, tuple[str, str]] = {
    "swagger-ui": (templates.SWAGGER_UI, "https://cdn.jsdelivr.net/npm/swagger-ui-dist@{version}"),
    "redoc": (templates.REDOC, "https://cdn.jsdelivr.net/npm/redoc@{version}"),
    "stoplight": (templates.STOPLIGHT, "https://unpkg.com/@stoplight/elements@{version}"),
}

_DEFAULT_VERSIONS: dict[str, str] = {
    "swagger-ui": "5",
    "redoc": "2",
    "stoplight": "8",
}

NO_CACHE_HEADERS: tuple[tuple[str, str], ...] = (
    ("Cache-Control", "no-cache, no-store, must-revalidate"),
    ("Pragma", "no-cache"),
    ("Expires", "0"),
)

CONTENT_TYPES: dict[str, str] = {
    "json": "application/json",
    "yaml": "application/x-yaml",
    "yml": "application/x-yaml",
}


def _environment() -> Any:
    try:
        from kida import Environment
    except ImportError:
        msg = (
            "The documentation page requires the 'kida' template engine. "
            "Install it with: pip install wren[docs]"
        )
        raise ConfigurationError(msg) from None
    return Environment(autoescape=False)


def spec_url(config: OpenAPIConfig) -> str:
    """URL the documentation page loads the schema from."""
    path = config.resolved_spec_path
    if config.base_url:
        return config.base_url.rstrip("/") + path
    return path


def _script_json(data: Any) -> str:
    """JSON safe to embed in an inline ``<script>``."""
    return json.dumps(data).replace("</", "<\\/")


def _swagger_options(config: OpenAPIConfig) -> dict[str, Any]:
    ui = config.ui
    options: dict[str, Any] = {
        "url": spec_url(config),
        "dom_id": "#swagger-ui",
        "deepLinking": ui.deep_linking,
        "docExpansion": ui.doc_expansion,
        "displayRequestDuration": ui.display_request_duration,
        "persistAuthorization": ui.persist_authorization,
    }
    options.update(ui.extra_options)
    return options


def render_docs_page(config: OpenAPIConfig) -> str:
    """Render the documentation page HTML for *config*'s UI provider."""
    provider = config.ui.provider
    if provider not in _PROVIDERS:
        msg = f"Unknown docs UI provider {provider!r}. Use one of: {', '.join(_PROVIDERS)}"
        raise ConfigurationError(msg)
    source, cdn_pattern = _PROVIDERS[provider]
    cdn = cdn_pattern.format(version=config.ui.cdn_version or _DEFAULT_VERSIONS[provider])

    template = _environment().from_string(source)
    return template.render(
        {
            "title": html.escape(config.title),
            "cdn": html.escape(cdn, quote=True),
            "spec_url": html.escape(spec_url(config), quote=True),
            "options": _script_json(_swagger_options(config)),
        }
    )


class DocsPageHandler:
    """Serves the rendered documentation page. Renders once, on first request."""

    __slots__ = ("_config", "_lock", "_page")

    def __init__(self, config: OpenAPIConfig) -> None:
        self._config = config
        self._lock = threading.Lock()
        self._page: str | None = None

    def __call__(self, request: Any = None) -> Response:
        if self._page is None:
            with self._lock:
                if self._page is None:
                    self._page = render_docs_page(self._config)
        return Response(body=self._page, content_type="text/html; charset=utf-8")


class SchemaFileHandler:
    """Serves the generated spec file.

    The schema is generated once, under a lock, on the first request; the
    outcome (bytes or failure) is reused for every later request. A failure
    answers 500 with a JSON error body.
    """

    __slots__ = ("_content_type", "_done", "_error", "_generate", "_lock", "_schema")

    def __init__(self, generate: Callable[[], bytes], format: str = "yaml") -> None:
        self._generate = generate
        self._content_type = CONTENT_TYPES.get(format, "application/x-yaml")
        self._lock = threading.Lock()
        self._done = False
        self._schema = b""
        self._error: Exception | None = None

    def _ensure_generated(self) -> None:
        if self._done:
            return
        with self._lock:
            if self._done:
                return
            try:
                self._schema = self._generate()
            except Exception as exc:
                logger.error("failed to generate OpenAPI schema:\n%s", exc)
                self._error = exc
            self._done = True

    def __call__(self, request: Any = None) -> Response:
        self._ensure_generated()
        if self._error is not None:
            return Response.json({"error": "failed to generate OpenAPI schema"}, status=500)
        return Response(
            body=self._schema,
            content_type=self._content_type,
            headers=NO_CACHE_HEADERS,
        )
