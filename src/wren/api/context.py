"""State shared by every node of one route tree."""

import logging
import threading
from typing import TYPE_CHECKING

from wren.config import OpenAPIConfig
from wren.errors import SpecError
from wren.openapi.document import Document, check_openapi_version
from wren.routing.params import ColonParamParser, PathParser

if TYPE_CHECKING:
    from wren.api.node import RouterNode

logger = logging.getLogger("wren.openapi")


class BuildContext:
    """One per tree, passed down to every node and route by reference.

    ``document`` is ``None`` when the API description is disabled. The
    ``lock`` and ``compiled`` latch make compilation happen exactly once.
    """

    __slots__ = (
        "compiled",
        "config",
        "document",
        "errors",
        "lock",
        "logger",
        "operation_count",
        "path_parser",
        "root",
    )

    def __init__(
        self,
        config: OpenAPIConfig | None = None,
        *,
        document: Document | None = None,
    ) -> None:
        self.config = config or OpenAPIConfig()
        self.errors = SpecError()
        self.lock = threading.Lock()
        self.compiled = False
        self.operation_count = 0
        self.path_parser: PathParser = self.config.path_parser or ColonParamParser()
        self.logger = logger
        self.root: RouterNode | None = None

        if self.config.disable_openapi:
            self.document: Document | None = None
        else:
            self.errors.add(check_openapi_version(self.config.openapi_version))
            self.document = document if document is not None else Document(self.config)

    @property
    def enabled(self) -> bool:
        return self.document is not None

    def check_not_compiled(self) -> None:
        if self.compiled:
            msg = (
                "Cannot modify the route tree after the API description was compiled. "
                "Register routes and metadata before validating or generating the schema."
            )
            raise RuntimeError(msg)
