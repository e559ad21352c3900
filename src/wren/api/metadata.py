"""Inheritable route metadata.

A node's metadata is an immutable snapshot. ``use()`` replaces the node's
snapshot with an extended copy; routes and child groups keep whatever
snapshot was current when they were created.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from wren.openapi.entities import SecurityRequirement, as_requirement


@dataclass(frozen=True, slots=True)
class Metadata:
    tags: tuple[str, ...] = ()
    security: tuple[SecurityRequirement, ...] = ()
    hidden: bool = False

    def extend(
        self,
        tags: Iterable[str] = (),
        security: Iterable[SecurityRequirement | str] = (),
        hide: bool = False,
    ) -> "Metadata":
        """Return a copy with *tags* and *security* appended.

        Hiding is one-way: once hidden, a snapshot stays hidden.
        """
        return Metadata(
            tags=(*self.tags, *tags),
            security=(*self.security, *(as_requirement(s) for s in security)),
            hidden=self.hidden or hide,
        )
