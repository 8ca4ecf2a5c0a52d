"""
Token trees for kwdecl.

A flat token list is grouped into nodes: a Leaf wraps one token, a Group
wraps a delimited run `( ... )`, `[ ... ]` or `{ ... }` and its children.
Argument and default scanning only ever looks at one level of children, so
commas nested inside inner delimiters never split an expression.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from .errors import TokenizeError
from .lexer import DELIMITERS, Span, Token, TokenType


class Node:
    """Base class for token-tree nodes."""

    __slots__ = ()

    @property
    def span(self) -> Span:
        raise NotImplementedError

    def first_token(self) -> Token:
        raise NotImplementedError

    def tokens(self) -> Iterator[Token]:
        raise NotImplementedError


@dataclass(frozen=True)
class Leaf(Node):
    """A single token."""

    token: Token

    @property
    def span(self) -> Span:
        return self.token.span

    def first_token(self) -> Token:
        return self.token

    def tokens(self) -> Iterator[Token]:
        yield self.token

    def is_ident(self) -> bool:
        return self.token.type == TokenType.IDENTIFIER

    def is_punct(self, value: str) -> bool:
        return self.token.is_punct(value)


@dataclass(frozen=True)
class Group(Node):
    """A delimited group and its nested nodes."""

    open: Token
    children: tuple[Node, ...]
    close: Token

    @property
    def delimiter(self) -> str:
        return self.open.value

    @property
    def span(self) -> Span:
        return self.open.span.to(self.close.span)

    def first_token(self) -> Token:
        return self.open

    def tokens(self) -> Iterator[Token]:
        return iter_tokens((self,))


def is_punct(node: Node | None, value: str) -> bool:
    return isinstance(node, Leaf) and node.is_punct(value)


def is_comma(node: Node | None) -> bool:
    return is_punct(node, ",")


def is_ident(node: Node | None) -> bool:
    return isinstance(node, Leaf) and node.is_ident()


def is_paren_group(node: Node | None) -> bool:
    return isinstance(node, Group) and node.delimiter == "("


def build_tree(tokens: Sequence[Token]) -> tuple[list[Node], Token]:
    """
    Group a token list into a node tree.

    Args:
        tokens: Tokens from the lexer, ending with EOF

    Returns:
        Tuple of (top-level nodes, EOF token holding the trailing trivia)

    Raises:
        TokenizeError: If delimiters are unbalanced or mismatched
    """
    root: list[Node] = []
    # Open delimiters not yet closed, each with the children collected so far
    stack: list[tuple[Token, list[Node]]] = []
    eof: Token | None = None

    for token in tokens:
        if token.type == TokenType.EOF:
            eof = token
            break

        if token.type == TokenType.OPEN_DELIM:
            stack.append((token, []))
            continue

        node: Node
        if token.type == TokenType.CLOSE_DELIM:
            if not stack:
                raise TokenizeError(f"unexpected closing delimiter `{token.value}`", token.span)
            open_token, children = stack.pop()
            if DELIMITERS[open_token.value] != token.value:
                raise TokenizeError(
                    f"mismatched closing delimiter `{token.value}` "
                    f"(expected `{DELIMITERS[open_token.value]}`)",
                    token.span,
                )
            node = Group(open_token, tuple(children), token)
        else:
            node = Leaf(token)

        (stack[-1][1] if stack else root).append(node)

    if stack:
        open_token = stack[-1][0]
        raise TokenizeError(f"unclosed delimiter `{open_token.value}`", open_token.span)

    if eof is None:
        raise TokenizeError("token stream is missing its end marker")

    return root, eof


def iter_tokens(nodes: Iterable[Node]) -> Iterator[Token]:
    """Flatten nodes back into their tokens, delimiters included."""
    # Children still to visit, paired with the token that closes their group
    stack: list[tuple[Iterator[Node], Token | None]] = [(iter(nodes), None)]
    while stack:
        children, close = stack[-1]
        node = next(children, None)
        if node is None:
            stack.pop()
            if close is not None:
                yield close
        elif isinstance(node, Group):
            yield node.open
            stack.append((iter(node.children), node.close))
        else:
            yield from node.tokens()


def render(nodes: Iterable[Node]) -> str:
    """Render nodes as source text, trivia included."""
    return "".join(token.trivia + token.value for token in iter_tokens(nodes))


def token_values(nodes: Iterable[Node]) -> list[str]:
    """Token values of the flattened nodes; the token-level identity of an expression."""
    return [token.value for token in iter_tokens(nodes)]


def with_leading_trivia(nodes: Sequence[Node], trivia: str) -> tuple[Node, ...]:
    """Return the nodes with the first token's trivia replaced."""
    if not nodes:
        return ()
    first = nodes[0]
    if isinstance(first, Leaf):
        first = Leaf(first.token.with_trivia(trivia))
    elif isinstance(first, Group):
        first = Group(first.open.with_trivia(trivia), first.children, first.close)
    return (first, *nodes[1:])


def strip_leading_trivia(nodes: Sequence[Node]) -> tuple[Node, ...]:
    return with_leading_trivia(nodes, "")


def make_leaf(token_type: TokenType, value: str, span: Span, trivia: str = "") -> Leaf:
    """Synthesize a leaf located at `span`."""
    return Leaf(Token(token_type, value, span, trivia))


def make_group(
    children: Sequence[Node], span: Span, delimiter: str = "(", close_trivia: str = ""
) -> Group:
    """Synthesize a delimited group located at `span`."""
    return Group(
        Token(TokenType.OPEN_DELIM, delimiter, span),
        tuple(children),
        Token(TokenType.CLOSE_DELIM, DELIMITERS[delimiter], span, close_trivia),
    )
