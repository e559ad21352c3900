"""OpenAPI object model for document-level metadata.

Frozen dataclasses for the pieces of the document that are not derived from
routes: contact and license info, servers, tags, and security schemes.
Each one knows how to render itself as the mapping OpenAPI expects via
``to_dict()``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

ApiKeyLocation = Literal["query", "header", "cookie"]


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is ``None`` or an empty container."""
    return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


@dataclass(frozen=True, slots=True)
class Contact:
    name: str | None = None
    url: str | None = None
    email: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"name": self.name, "url": self.url, "email": self.email})


@dataclass(frozen=True, slots=True)
class License:
    name: str
    url: str | None = None
    identifier: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"name": self.name, "identifier": self.identifier, "url": self.url}
        )


@dataclass(frozen=True, slots=True)
class ExternalDocs:
    url: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"description": self.description, "url": self.url})


@dataclass(frozen=True, slots=True)
class Tag:
    """A tag declared at document level, with optional description."""

    name: str
    description: str | None = None
    external_docs: ExternalDocs | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "description": self.description,
                "externalDocs": self.external_docs.to_dict() if self.external_docs else None,
            }
        )


@dataclass(frozen=True, slots=True)
class ServerVariable:
    default: str
    enum: tuple[str, ...] = ()
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "enum": list(self.enum),
                "default": self.default,
                "description": self.description,
            }
        )


@dataclass(frozen=True, slots=True)
class Server:
    url: str
    description: str | None = None
    variables: Mapping[str, ServerVariable] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "url": self.url,
                "description": self.description,
                "variables": {k: v.to_dict() for k, v in self.variables.items()},
            }
        )


@dataclass(frozen=True, slots=True)
class OAuthFlow:
    """A single OAuth2 flow.

    ``authorization_url`` applies to implicit and authorization-code flows,
    ``token_url`` to password, client-credentials and authorization-code.
    """

    scopes: Mapping[str, str] = field(default_factory=dict)
    authorization_url: str | None = None
    token_url: str | None = None
    refresh_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = _compact(
            {
                "authorizationUrl": self.authorization_url,
                "tokenUrl": self.token_url,
                "refreshUrl": self.refresh_url,
            }
        )
        # scopes is required even when empty
        data["scopes"] = dict(self.scopes)
        return data


@dataclass(frozen=True, slots=True)
class OAuthFlows:
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None

    def to_dict(self) -> dict[str, Any]:
        flows = {
            "implicit": self.implicit,
            "password": self.password,
            "clientCredentials": self.client_credentials,
            "authorizationCode": self.authorization_code,
        }
        return {k: v.to_dict() for k, v in flows.items() if v is not None}


@dataclass(frozen=True, slots=True)
class SecurityScheme:
    """A ``components.securitySchemes`` entry.

    Build one with the constructors rather than by hand::

        SecurityScheme.http_bearer(format="JWT")
        SecurityScheme.api_key("X-API-Key", "header")
        SecurityScheme.oauth2(OAuthFlows(password=OAuthFlow(token_url="/token")))
    """

    type: str
    description: str | None = None
    name: str | None = None
    in_: ApiKeyLocation | None = None
    scheme: str | None = None
    bearer_format: str | None = None
    flows: OAuthFlows | None = None
    open_id_connect_url: str | None = None

    @classmethod
    def api_key(
        cls, name: str, in_: ApiKeyLocation = "header", description: str | None = None
    ) -> "SecurityScheme":
        return cls(type="apiKey", name=name, in_=in_, description=description)

    @classmethod
    def http_bearer(
        cls, format: str | None = None, description: str | None = None
    ) -> "SecurityScheme":
        return cls(
            type="http", scheme="bearer", bearer_format=format, description=description
        )

    @classmethod
    def http_basic(cls, description: str | None = None) -> "SecurityScheme":
        return cls(type="http", scheme="basic", description=description)

    @classmethod
    def oauth2(cls, flows: OAuthFlows, description: str | None = None) -> "SecurityScheme":
        return cls(type="oauth2", flows=flows, description=description)

    @classmethod
    def open_id_connect(
        cls, url: str, description: str | None = None
    ) -> "SecurityScheme":
        return cls(type="openIdConnect", open_id_connect_url=url, description=description)

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "type": self.type,
                "description": self.description,
                "name": self.name,
                "in": self.in_,
                "scheme": self.scheme,
                "bearerFormat": self.bearer_format,
                "flows": self.flows.to_dict() if self.flows else None,
                "openIdConnectUrl": self.open_id_connect_url,
            }
        )


@dataclass(frozen=True, slots=True)
class SecurityRequirement:
    """One entry of an operation's ``security`` list.

    Renders as ``{name: [scopes...]}``.
    """

    name: str
    scopes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {self.name: list(self.scopes)}


def as_requirement(value: "SecurityRequirement | str") -> SecurityRequirement:
    """Accept a bare scheme name wherever a requirement is expected."""
    if isinstance(value, SecurityRequirement):
        return value
    return SecurityRequirement(value)
