"""
Rewrite session.

Drives a single left-to-right pass over source text, standing in for the
host compiler's traversal: declaration statements are parsed into the
session's registry, and later invocations of declared names are replaced by
their expanded positional form.

Failures are local. An error in one declaration or call site is recorded as
a Diagnostic and the pass carries on with the next node.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .config import ErrorMode, KwdeclConfig
from .declaration import Declaration, parse_declaration
from .diagnostics import Diagnostic
from .errors import DiagnosticError, TokenizeError
from .expander import expand_call
from .lexer import Span, Token, TokenType, tokenize
from .registry import DeclarationRegistry
from .tokens import (
    Group,
    Leaf,
    Node,
    build_tree,
    is_ident,
    is_paren_group,
    is_punct,
    make_leaf,
    render,
    with_leading_trivia,
)

logger = logging.getLogger(__name__)

# Punctuation after which an identifier names a member, not a statement or call
MEMBER_ACCESS = (".", "->")


@dataclass
class RewriteResult:
    """Output of rewriting one source text."""

    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)
    file: Path | None = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics


@dataclass
class _Pass:
    """Per-text bookkeeping for one rewrite."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)

    def report(self, error: DiagnosticError) -> None:
        logger.debug("Diagnostic at %s: %s", error.span, error.message)
        self.diagnostics.append(Diagnostic.from_error(error))


@dataclass
class _Frame:
    """One level of the token tree being rewritten."""

    nodes: Sequence[Node]
    group: Group | None = None
    # Set when `group` holds the arguments of an invocation of `name`
    name: Token | None = None
    marker: Sequence[Node] = ()
    index: int = 0
    output: list[Node] = field(default_factory=list)
    # Trivia of removed statements, not yet attached to a following node
    pending: str = ""

    def emit(self, new_nodes: Sequence[Node]) -> None:
        if not new_nodes:
            return
        if self.pending:
            new_nodes = with_leading_trivia(
                new_nodes, self.pending + new_nodes[0].first_token().trivia
            )
            self.pending = ""
        self.output.extend(new_nodes)


def _close_group(group: Group, children: Sequence[Node], leftover: str) -> Group:
    close = group.close.with_trivia(leftover + group.close.trivia) if leftover else group.close
    return Group(group.open, tuple(children), close)


def _after_member_access(nodes: Sequence[Node], i: int) -> bool:
    return i > 0 and any(is_punct(nodes[i - 1], op) for op in MEMBER_ACCESS)


class RewriteSession:
    """
    One compilation session: a registry plus the rules for using it.

    The registry outlives individual texts, so a declaration made while
    rewriting one file applies to every file rewritten after it.
    """

    def __init__(
        self,
        config: KwdeclConfig | None = None,
        registry: DeclarationRegistry | None = None,
    ) -> None:
        self.config = config or KwdeclConfig()
        self.registry = registry or DeclarationRegistry(self.config.registry.redeclaration)

    def rewrite(self, text: str, file: Path | None = None) -> RewriteResult:
        """
        Rewrite all declarations and invocations in `text`.

        Args:
            text: Source text
            file: Source path, used in diagnostics

        Returns:
            RewriteResult with the new text and any diagnostics
        """
        try:
            nodes, eof = build_tree(tokenize(text, file))
        except TokenizeError as e:
            return RewriteResult(text=text, diagnostics=[Diagnostic.from_error(e)], file=file)

        state = _Pass()
        rewritten, leftover = self._rewrite_nodes(nodes, state)
        output = render(rewritten) + leftover + eof.trivia

        logger.debug(
            "Rewrote %s: %d declarations, %d diagnostics",
            file or "<input>",
            len(state.declarations),
            len(state.diagnostics),
        )
        return RewriteResult(
            text=output,
            diagnostics=state.diagnostics,
            declarations=state.declarations,
            file=file,
        )

    def rewrite_file(self, path: Path) -> RewriteResult:
        return self.rewrite(path.read_text(encoding="utf-8"), path)

    def _rewrite_nodes(self, nodes: Sequence[Node], state: _Pass) -> tuple[list[Node], str]:
        """
        Rewrite a node sequence, descending into groups.

        Groups are walked with an explicit stack, so deeply nested source
        never runs into the interpreter's recursion limit.

        Returns:
            Tuple of (rewritten nodes, trivia of removed statements not yet
            attached to a following node)
        """
        root = _Frame(nodes)
        stack = [root]

        while stack:
            frame = stack[-1]
            if frame.index < len(frame.nodes):
                child = self._step(frame, state)
                if child is not None:
                    stack.append(child)
                continue

            stack.pop()
            if frame.group is None:
                continue

            # Children are done: rebuild the group, then hand it to the parent
            group = _close_group(frame.group, frame.output, frame.pending)
            parent = stack[-1]
            if frame.name is None:
                parent.emit([group])
            else:
                parent.emit(self._expand(frame.name, frame.marker, group, state))

        return root.output, root.pending

    def _step(self, frame: _Frame, state: _Pass) -> _Frame | None:
        """Handle the node at `frame.index` and return a frame to descend into, if any."""
        nodes, i = frame.nodes, frame.index
        node = nodes[i]

        consumed = self._declaration_length(nodes, i)
        if consumed:
            keyword = node.first_token()
            self._declare(nodes[i + 1 : i + consumed], keyword.span, state)
            if i + consumed < len(nodes) and is_punct(nodes[i + consumed], ";"):
                consumed += 1

            if self.config.rewrite.strip_declarations:
                frame.pending += keyword.trivia
            else:
                frame.emit(nodes[i : i + consumed])
            frame.index += consumed
            return None

        invocation = self._match_invocation(nodes, i)
        if invocation is not None:
            name, marker, group = invocation
            frame.index += len(marker) + 2
            return _Frame(group.children, group=group, name=name.token, marker=marker)

        frame.index += 1
        if isinstance(node, Group):
            return _Frame(node.children, group=node)
        frame.emit([node])
        return None

    def _declaration_length(self, nodes: Sequence[Node], i: int) -> int:
        """
        Number of nodes in the declaration statement starting at `i`.

        A statement is the keyword followed by an identifier, and normally a
        parameter group. Anything else, `obj.declare(...)` included, is 0:
        the keyword is then an ordinary identifier.
        """
        keyword = nodes[i]
        if not is_ident(keyword) or _after_member_access(nodes, i):
            return 0
        if keyword.first_token().value != self.config.rewrite.declaration_keyword:
            return 0
        if i + 1 >= len(nodes) or not is_ident(nodes[i + 1]):
            return 0
        if i + 2 < len(nodes) and is_paren_group(nodes[i + 2]):
            return 3
        return 2

    def _match_invocation(
        self, nodes: Sequence[Node], i: int
    ) -> tuple[Leaf, tuple[Node, ...], Group] | None:
        """Match `NAME [marker] ( ... )` at `i` for a declared NAME."""
        name = nodes[i]
        if not isinstance(name, Leaf) or not name.is_ident():
            return None
        if name.token.value not in self.registry or _after_member_access(nodes, i):
            return None

        marker: tuple[Node, ...] = ()
        position = i + 1
        marker_text = self.config.rewrite.invocation_marker
        if marker_text:
            following = nodes[position] if position < len(nodes) else None
            if not isinstance(following, Leaf) or following.token.value != marker_text:
                return None
            marker = (following,)
            position += 1

        group = nodes[position] if position < len(nodes) else None
        if isinstance(group, Group) and group.delimiter == "(":
            return name, marker, group
        return None

    def _declare(self, nodes: Sequence[Node], span: Span, state: _Pass) -> None:
        try:
            declaration = parse_declaration(nodes, span)
            self.registry.insert(declaration)
        except DiagnosticError as e:
            state.report(e)
            return
        state.declarations.append(declaration)
        logger.debug("Declared %s", declaration)

    def _expand(
        self, name: Token, marker: Sequence[Node], group: Group, state: _Pass
    ) -> list[Node]:
        declaration = self.registry.lookup(name.value)
        if declaration is None:
            return [Leaf(name), *marker, group]

        try:
            return expand_call(declaration, name, group)
        except DiagnosticError as e:
            state.report(e)

        if self.config.rewrite.on_error == ErrorMode.KEEP:
            return [Leaf(name), *marker, group]
        return [
            make_leaf(TokenType.IDENTIFIER, self.config.rewrite.placeholder, name.span, name.trivia)
        ]
