"""
Call-site expansion.

Rewrites one invocation of a declared name, written with any mix of
positional and `name = value` arguments, into a fully positional call in
declared parameter order with defaults filled in:

    declare foo(a = 1, b = 2, c = 3)
    foo(c = 30, a = 10)   →   foo(10, 2, 30)

Argument values are opaque token sequences: they are moved, never inspected.
The expander keeps no state between calls; everything it reads is passed in.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .cursor import LookAhead
from .declaration import Declaration
from .errors import (
    ArityExceeded,
    EmptyArgumentValue,
    MissingRequiredArgument,
    OrderingViolation,
    UnknownArgumentName,
)
from .lexer import Span, Token, TokenType
from .tokens import (
    Group,
    Leaf,
    Node,
    is_comma,
    make_group,
    make_leaf,
    strip_leading_trivia,
    with_leading_trivia,
)

logger = logging.getLogger(__name__)


class SlotState(Enum):
    UNBOUND = "unbound"
    BOUND = "bound"
    DEFAULTED = "defaulted"


@dataclass
class BindingSlot:
    """Value bound to one parameter during a single expansion."""

    state: SlotState
    value: tuple[Node, ...] | None = None
    # Trivia that followed the argument at the call site, comments included
    trailing: str = ""

    def bind(self, value: tuple[Node, ...], trailing: str = "") -> None:
        self.state = SlotState.BOUND
        self.value = value
        self.trailing = trailing


def _initial_slots(declaration: Declaration) -> list[BindingSlot]:
    slots = []
    for parameter in declaration.parameters:
        if parameter.default is None:
            slots.append(BindingSlot(SlotState.UNBOUND))
        else:
            slots.append(BindingSlot(SlotState.DEFAULTED, parameter.default))
    return slots


def _collect_value(cursor: LookAhead, eq: Leaf | None, span: Span) -> tuple[Node, ...]:
    """Collect nodes up to the next top-level comma or the end of the arguments."""
    collected: list[Node] = []
    while cursor.current is not None and not is_comma(cursor.current):
        collected.append(cursor.current)
        cursor.advance()

    if not collected:
        if cursor.current is not None:
            raise EmptyArgumentValue("unexpected token: `,`", cursor.current.span)
        raise EmptyArgumentValue(
            "expected argument value after `=`", eq.span if eq is not None else span
        )
    return tuple(collected)


def _bind(
    declaration: Declaration, nodes: Sequence[Node], span: Span, close_trivia: str = ""
) -> tuple[list[tuple[tuple[Node, ...], str]], str]:
    """
    Bind call arguments to slots, keeping the trivia written after each one.

    Returns:
        Tuple of (expression and trailing trivia per declared parameter, the
        part of `close_trivia` that no argument claimed)
    """
    slots = _initial_slots(declaration)
    cursor = LookAhead(nodes)
    found_keyword = False
    next_positional = 0
    leftover = close_trivia

    head = cursor.current
    while head is not None:
        following = cursor.next
        eq: Leaf | None = None

        if (
            isinstance(head, Leaf)
            and head.is_ident()
            and isinstance(following, Leaf)
            and following.is_punct("=")
        ):
            name = head.token.value
            index = declaration.index_of(name)
            if index is None:
                raise UnknownArgumentName(f"unknown argument name `{name}`", head.span)

            found_keyword = True
            eq = following
            # Skip argument name and `=`
            cursor.advance()
            cursor.advance()
        else:
            if found_keyword:
                raise OrderingViolation(
                    "positional arguments must precede keyword arguments", head.span
                )
            if next_positional == declaration.arity:
                raise ArityExceeded(
                    f"too many arguments passed to `{declaration.name}` "
                    f"(expected {declaration.arity})",
                    head.span,
                )
            index = next_positional
            next_positional += 1

        value = _collect_value(cursor, eq, span)
        if cursor.current is None:
            trailing, leftover = leftover, ""
        else:
            trailing = cursor.current.first_token().trivia
        slots[index].bind(value, trailing)

        # Step over the separating comma
        head = cursor.advance()

    resolved: list[tuple[tuple[Node, ...], str]] = []
    for parameter, slot in zip(declaration.parameters, slots):
        if slot.state == SlotState.UNBOUND or slot.value is None:
            raise MissingRequiredArgument(
                f"argument `{parameter.name}` is required, but not given a value",
                span,
                parameter=parameter.name,
            )
        resolved.append((strip_leading_trivia(slot.value), slot.trailing))
    return resolved, leftover


def expand_arguments(
    declaration: Declaration, nodes: Sequence[Node], span: Span
) -> list[tuple[Node, ...]]:
    """
    Bind the raw arguments of one call to the declared parameters.

    Args:
        declaration: Declaration of the called name
        nodes: Children of the call's parenthesised group
        span: Location of the whole invocation

    Returns:
        One expression per declared parameter, in declared order

    Raises:
        UnknownArgumentName: A keyword names no declared parameter
        OrderingViolation: A positional argument follows a keyword argument
        ArityExceeded: More positional arguments than parameters
        EmptyArgumentValue: A `=` or `,` with nothing after it
        MissingRequiredArgument: A parameter without default received no value
    """
    bound, _ = _bind(declaration, nodes, span)
    return [expression for expression, _ in bound]


def build_call(
    declaration: Declaration,
    arguments: Sequence[tuple[Node, ...]],
    name_token: Token,
    span: Span,
    trailing: Sequence[str] = (),
    close_trivia: str = "",
) -> list[Node]:
    """
    Assemble `NAME ( expr_0 , ... , expr_N-1 )`.

    The call site's name token is reused so the call keeps its leading
    whitespace; synthesized punctuation is located at `span`. `trailing[i]`
    is placed right after argument i, so comments written next to an
    argument move with it.
    """
    after = [*trailing, *[""] * (len(arguments) - len(trailing))]
    children: list[Node] = []
    for position, argument in enumerate(arguments):
        if position:
            children.append(make_leaf(TokenType.PUNCT, ",", span, after[position - 1]))
            children.extend(with_leading_trivia(argument, " "))
        else:
            children.extend(argument)

    if arguments:
        close_trivia = after[len(arguments) - 1] + close_trivia

    name = make_leaf(TokenType.IDENTIFIER, declaration.name, name_token.span, name_token.trivia)
    return [name, make_group(children, span, close_trivia=close_trivia)]


def expand_call(declaration: Declaration, name_token: Token, group: Group) -> list[Node]:
    """
    Expand one invocation `NAME ( ... )` of a declared name.

    Returns:
        The nodes of the rewritten, fully positional call
    """
    span = name_token.span.to(group.close.span)
    bound, leftover = _bind(declaration, group.children, span, group.close.trivia)
    logger.debug("Expanded call to %s at %s", declaration.name, span)
    return build_call(
        declaration,
        [expression for expression, _ in bound],
        name_token,
        span,
        trailing=[trivia for _, trivia in bound],
        close_trivia=leftover,
    )
