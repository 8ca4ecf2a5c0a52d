"""Shared pytest fixtures and helpers for kwdecl tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from kwdecl.core.config import KwdeclConfig
from kwdecl.core.declaration import Declaration, parse_declaration
from kwdecl.core.lexer import Span, tokenize
from kwdecl.core.session import RewriteSession
from kwdecl.core.tokens import Group, Node, build_tree, token_values


def parse_nodes(text: str) -> list[Node]:
    """Top-level token-tree nodes of `text`."""
    nodes, _ = build_tree(tokenize(text))
    return nodes


def declare(text: str) -> Declaration:
    """Parse `foo(a = 1, b)` (the part after the declaration keyword)."""
    return parse_declaration(parse_nodes(text))


def call_args(text: str) -> tuple[Node, ...]:
    """Children of the parenthesised group in `text`, e.g. `(c = 30, a = 10)`."""
    group = parse_nodes(text)[-1]
    assert isinstance(group, Group)
    return group.children


def values(expressions: Sequence[Sequence[Node]]) -> list[list[str]]:
    """Token values of each resolved expression."""
    return [token_values(expr) for expr in expressions]


@pytest.fixture
def call_span() -> Span:
    """A span standing in for a whole invocation."""
    return Span(file=None, line=1, column=1, start=0, end=0)


@pytest.fixture
def config() -> KwdeclConfig:
    return KwdeclConfig()


@pytest.fixture
def session(config: KwdeclConfig) -> RewriteSession:
    """A fresh session with default configuration."""
    return RewriteSession(config)
