"""
Declarations and the declaration parser.

A declaration binds a target name to an ordered parameter list:

    declare foo(a = 1, b, c = make(1, 2))

The parameter order is the positional order every expanded call uses.
Defaults are kept as raw token-tree sequences and are never evaluated.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, field_validator

from .cursor import LookAhead
from .errors import DeclarationSyntaxError
from .lexer import Span
from .tokens import Group, Leaf, Node, is_comma, render

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ENTRY_EXPECTED = "expected a sequence of `arg_name` or `arg_name = default_expr`"


class Parameter(BaseModel):
    """One declared parameter and its optional default expression."""

    name: str = Field(description="Parameter name")
    default: tuple[InstanceOf[Node], ...] | None = Field(
        default=None, description="Default expression tokens, or None if required"
    )
    span: InstanceOf[Span] | None = Field(default=None, description="Location of the name")

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def _identifier_shaped(cls, value: str) -> str:
        if not _IDENT_RE.match(value):
            raise ValueError(f"parameter name must be an identifier, got {value!r}")
        return value

    @property
    def required(self) -> bool:
        return self.default is None

    def __str__(self) -> str:
        if self.default is None:
            return self.name
        return f"{self.name} = {render(self.default).strip()}"


class Declaration(BaseModel):
    """
    A named parameter-list template.

    Examples:
        - declare foo(a = 1, b = 2) → Declaration(name="foo", parameters=[a, b])
        - declare baz() → Declaration(name="baz", parameters=[])
    """

    name: str = Field(description="Target callee name")
    parameters: tuple[Parameter, ...] = Field(default=(), description="Parameters in order")
    span: InstanceOf[Span] | None = Field(default=None, description="Location of the target")

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def _identifier_shaped(cls, value: str) -> str:
        if not _IDENT_RE.match(value):
            raise ValueError(f"declaration name must be an identifier, got {value!r}")
        return value

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def parameter_names(self) -> list[str]:
        return [p.name for p in self.parameters]

    def index_of(self, name: str) -> int | None:
        """Position of the parameter called `name`, or None."""
        for index, parameter in enumerate(self.parameters):
            if parameter.name == name:
                return index
        return None

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.name}({params})"


def parse_declaration(nodes: Sequence[Node], span: Span | None = None) -> Declaration:
    """
    Parse the nodes following the declaration keyword.

    Grammar:
        IDENT "(" (IDENT ("=" TOKEN+)? ","?)* ")"

    A default needs at least one token: `name =` followed by a comma or the
    closing parenthesis would substitute an empty expression into the call,
    so it is rejected here rather than at every call site.

    Args:
        nodes: Nodes after the keyword: the target identifier and its group
        span: Location of the whole statement, used when nothing better exists

    Returns:
        The parsed Declaration

    Raises:
        DeclarationSyntaxError: If the statement is malformed
    """
    target = nodes[0] if nodes else None
    if not isinstance(target, Leaf) or not target.is_ident():
        where = target.span if target is not None else span
        raise DeclarationSyntaxError("expected the name of the declared function", where)

    group = nodes[1] if len(nodes) > 1 else None
    if not isinstance(group, Group) or group.delimiter != "(":
        where = group.span if group is not None else target.span
        raise DeclarationSyntaxError(
            f"expected a parenthesised parameter list after `{target.token.value}`", where
        )

    if len(nodes) > 2:
        raise DeclarationSyntaxError("unexpected tokens after the parameter list", nodes[2].span)

    parameters = _parse_parameters(group)

    declaration = Declaration(name=target.token.value, parameters=parameters, span=target.span)
    logger.debug("Parsed declaration %s", declaration)
    return declaration


def _parse_parameters(group: Group) -> list[Parameter]:
    """Parse `name` / `name = tokens` entries separated by top-level commas."""
    parameters: list[Parameter] = []
    seen: set[str] = set()
    cursor = LookAhead(group.children)

    head = cursor.current
    while head is not None:
        if not isinstance(head, Leaf) or not head.is_ident():
            raise DeclarationSyntaxError(ENTRY_EXPECTED, head.span)

        name = head.token.value
        if name in seen:
            raise DeclarationSyntaxError(f"duplicate parameter name `{name}`", head.span)
        seen.add(name)

        following = cursor.advance()
        default: tuple[Node, ...] | None = None

        if isinstance(following, Leaf) and following.is_punct("="):
            collected: list[Node] = []
            node = cursor.advance()
            while node is not None and not is_comma(node):
                collected.append(node)
                node = cursor.advance()
            if not collected:
                raise DeclarationSyntaxError(
                    "expected default expression after `=`", following.span
                )
            default = tuple(collected)

        elif following is not None and not is_comma(following):
            raise DeclarationSyntaxError(ENTRY_EXPECTED, following.span)

        parameters.append(Parameter(name=name, default=default, span=head.span))

        # Step over the separating comma, if any
        head = cursor.advance()

    return parameters
