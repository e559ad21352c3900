"""Route tree: nodes, routes, inherited metadata and compilation."""

from wren.api.context import BuildContext
from wren.api.metadata import Metadata
from wren.api.node import RouterNode
from wren.api.route import Route

__all__ = ["BuildContext", "Metadata", "Route", "RouterNode"]
