"""OpenAPI description: document model, operation builder, schema reflection."""

from wren.openapi.entities import (
    Contact,
    ExternalDocs,
    License,
    OAuthFlow,
    OAuthFlows,
    SecurityRequirement,
    SecurityScheme,
    Server,
    ServerVariable,
    Tag,
)
from wren.openapi.operation import Content, OperationBuilder, OperationOptions

__all__ = [
    "Contact",
    "Content",
    "ExternalDocs",
    "License",
    "OAuthFlow",
    "OAuthFlows",
    "OperationBuilder",
    "OperationOptions",
    "SecurityRequirement",
    "SecurityScheme",
    "Server",
    "ServerVariable",
    "Tag",
]
