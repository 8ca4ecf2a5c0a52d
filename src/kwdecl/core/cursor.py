"""
Two-node lookahead over a token-tree sequence.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .tokens import Node


class LookAhead:
    """
    Window of two nodes over a sequence.

    `current` and `next` are None once the sequence runs out. Looking two
    nodes ahead lets callers tell a keyword-argument head `name =` apart from
    an expression that merely starts with an identifier, without backtracking.
    """

    def __init__(self, nodes: Iterable[Node]) -> None:
        self._nodes: Iterator[Node] = iter(nodes)
        self.current: Node | None = None
        self.next: Node | None = None
        self.advance()
        self.advance()

    def advance(self) -> Node | None:
        """Shift the window by one node and return the new current node."""
        self.current = self.next
        self.next = next(self._nodes, None)
        return self.current

    @property
    def exhausted(self) -> bool:
        return self.current is None
