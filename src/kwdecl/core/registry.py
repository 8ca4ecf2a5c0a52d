"""
Declaration registry.

Maps declared names to their Declaration for the lifetime of one rewrite
session. Entries are never deleted. The registry does no locking; a host that
rewrites concurrently must serialise inserts against lookups itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import StrEnum

from .declaration import Declaration
from .errors import RedeclarationError

logger = logging.getLogger(__name__)


class RedeclarationPolicy(StrEnum):
    """What happens when a name is declared a second time."""

    OVERWRITE = "overwrite"  # replace silently
    WARN = "warn"  # replace and log a warning
    ERROR = "error"  # keep the first declaration and raise


class DeclarationRegistry:
    """Session-scoped mapping from declared name to Declaration."""

    def __init__(self, policy: RedeclarationPolicy = RedeclarationPolicy.OVERWRITE) -> None:
        self.policy = RedeclarationPolicy(policy)
        self._declarations: dict[str, Declaration] = {}

    def insert(self, declaration: Declaration) -> None:
        """
        Register a declaration under its target name.

        Raises:
            RedeclarationError: If the name exists and the policy is ERROR
        """
        previous = self._declarations.get(declaration.name)
        if previous is not None:
            if self.policy == RedeclarationPolicy.ERROR:
                where = f" (first declared at {previous.span})" if previous.span else ""
                raise RedeclarationError(
                    f"`{declaration.name}` is already declared{where}", declaration.span
                )
            if self.policy == RedeclarationPolicy.WARN:
                logger.warning(
                    "Redeclaration of %s replaces %s", declaration, previous
                )

        self._declarations[declaration.name] = declaration
        logger.debug("Registered declaration %s", declaration.name)

    def lookup(self, name: str) -> Declaration | None:
        return self._declarations.get(name)

    def names(self) -> list[str]:
        return list(self._declarations)

    def __contains__(self, name: object) -> bool:
        return name in self._declarations

    def __len__(self) -> int:
        return len(self._declarations)

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self._declarations.values())
