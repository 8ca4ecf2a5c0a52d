"""Tests for call-site expansion.

Covers: default filling, keyword reordering, positional binding, every
error kind, nested commas, and the no-op on already-positional calls.
"""

from __future__ import annotations

import pytest
from conftest import call_args, declare, parse_nodes, values

from kwdecl.core.errors import (
    ArityExceeded,
    DiagnosticKind,
    EmptyArgumentValue,
    MissingRequiredArgument,
    OrderingViolation,
    UnknownArgumentName,
)
from kwdecl.core.expander import build_call, expand_arguments, expand_call
from kwdecl.core.lexer import Span
from kwdecl.core.tokens import Group, Leaf, render, token_values


@pytest.fixture
def foo():
    return declare("foo(a = 1, b = 2, c = 3)")


class TestBinding:
    """Arguments bind to parameters in declared order."""

    def test_all_defaults(self, foo, call_span: Span) -> None:
        assert values(expand_arguments(foo, call_args("()"), call_span)) == [["1"], ["2"], ["3"]]

    def test_keywords_in_any_order(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(c = 30, a = 10)"), call_span)
        assert values(result) == [["10"], ["2"], ["30"]]

    def test_positional_then_keyword(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(7, c = 9)"), call_span)
        assert values(result) == [["7"], ["2"], ["9"]]

    def test_expression_is_not_evaluated(self, call_span: Span) -> None:
        bar = declare("bar(a)")
        assert values(expand_arguments(bar, call_args("(1+5)"), call_span)) == [["1", "+", "5"]]
        assert values(expand_arguments(bar, call_args("(a = 1 + 5)"), call_span)) == [
            ["1", "+", "5"]
        ]

    def test_keyword_value_may_contain_assignment(self, call_span: Span) -> None:
        baz2 = declare("baz2(a)")
        result = expand_arguments(baz2, call_args("(a = a = 1u)"), call_span)
        assert values(result) == [["a", "=", "1u"]]

    def test_comparison_is_positional(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(a == 1)"), call_span)
        assert values(result)[0] == ["a", "==", "1"]

    def test_nested_commas_do_not_split(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(g(1, 2), b = [3, 4])"), call_span)
        assert values(result) == [
            ["g", "(", "1", ",", "2", ")"],
            ["[", "3", ",", "4", "]"],
            ["3"],
        ]

    def test_trailing_comma(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(5,)"), call_span)
        assert values(result) == [["5"], ["2"], ["3"]]

    def test_later_binding_wins(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(1, a = 5)"), call_span)
        assert values(result)[0] == ["5"]

    def test_empty_declaration_empty_call(self, call_span: Span) -> None:
        baz = declare("baz()")
        assert expand_arguments(baz, call_args("()"), call_span) == []

    def test_defaults_reinserted_every_time(self, foo, call_span: Span) -> None:
        first = expand_arguments(foo, call_args("()"), call_span)
        second = expand_arguments(foo, call_args("(b = 0)"), call_span)
        third = expand_arguments(foo, call_args("()"), call_span)
        assert values(first) == values(third)
        assert values(second) == [["1"], ["0"], ["3"]]
        assert token_values(foo.parameters[1].default) == ["2"]

    def test_leading_trivia_is_stripped(self, foo, call_span: Span) -> None:
        result = expand_arguments(foo, call_args("(   x, b =   y)"), call_span)
        assert render(result[0]) == "x"
        assert render(result[1]) == "y"


class TestErrors:
    """Each invalid call raises the matching error and stops."""

    def test_missing_required(self, call_span: Span) -> None:
        bar = declare("bar(a)")
        with pytest.raises(MissingRequiredArgument, match="argument `a` is required") as exc:
            expand_arguments(bar, call_args("()"), call_span)
        assert exc.value.parameter == "a"
        assert exc.value.span == call_span
        assert exc.value.kind == DiagnosticKind.MISSING_REQUIRED_ARGUMENT

    def test_missing_names_first_unbound(self, call_span: Span) -> None:
        decl = declare("f(a, b = 1, c)")
        with pytest.raises(MissingRequiredArgument) as exc:
            expand_arguments(decl, call_args("(1)"), call_span)
        assert exc.value.parameter == "c"

    def test_arity_exceeded_on_empty_declaration(self, call_span: Span) -> None:
        baz = declare("baz()")
        message = r"too many arguments passed to `baz` \(expected 0\)"
        with pytest.raises(ArityExceeded, match=message):
            expand_arguments(baz, call_args("(1)"), call_span)

    def test_arity_exceeded_points_at_extra_argument(self, foo, call_span: Span) -> None:
        with pytest.raises(ArityExceeded) as exc:
            expand_arguments(foo, call_args("(1, 2, 3, 4)"), call_span)
        assert exc.value.span is not None
        assert exc.value.span.column == 11

    def test_positional_after_keyword(self, foo, call_span: Span) -> None:
        with pytest.raises(OrderingViolation, match="positional arguments must precede") as exc:
            expand_arguments(foo, call_args("(a = 1, 2)"), call_span)
        assert exc.value.span is not None
        assert exc.value.span.column == 9

    def test_unknown_name(self, foo, call_span: Span) -> None:
        with pytest.raises(UnknownArgumentName, match="`z`") as exc:
            expand_arguments(foo, call_args("(z = 1)"), call_span)
        assert exc.value.span is not None
        assert exc.value.span.column == 2

    def test_empty_value_after_equals(self, foo, call_span: Span) -> None:
        with pytest.raises(EmptyArgumentValue, match="after `=`") as exc:
            expand_arguments(foo, call_args("(a =)"), call_span)
        assert exc.value.span is not None
        assert exc.value.span.column == 4

    def test_empty_value_before_comma(self, foo, call_span: Span) -> None:
        with pytest.raises(EmptyArgumentValue, match="unexpected token: `,`"):
            expand_arguments(foo, call_args("(a = , b = 1)"), call_span)

    def test_leading_comma(self, foo, call_span: Span) -> None:
        with pytest.raises(EmptyArgumentValue, match="unexpected token: `,`"):
            expand_arguments(foo, call_args("(, 1)"), call_span)

    def test_first_error_wins(self, foo, call_span: Span) -> None:
        # Unknown name comes before the ordering problem
        with pytest.raises(UnknownArgumentName):
            expand_arguments(foo, call_args("(z = 1, 2)"), call_span)


class TestBuildCall:
    """The rewritten call is `NAME(expr, ...)` in declared order."""

    def test_expand_call_reorders(self, foo) -> None:
        name, group = parse_nodes("foo(c = 30, a = 10)")
        assert isinstance(name, Leaf) and isinstance(group, Group)
        assert render(expand_call(foo, name.token, group)) == "foo(10, 2, 30)"

    def test_canonical_call_is_unchanged(self, foo) -> None:
        nodes = parse_nodes("foo(1,2,3)")
        name, group = nodes
        assert isinstance(name, Leaf) and isinstance(group, Group)
        expanded = expand_call(foo, name.token, group)
        assert token_values(expanded) == token_values(nodes)

    def test_empty_call(self) -> None:
        baz = declare("baz()")
        name, group = parse_nodes("  baz()")
        assert isinstance(name, Leaf) and isinstance(group, Group)
        assert render(expand_call(baz, name.token, group)) == "  baz()"

    def test_build_call_separators(self, foo, call_span: Span) -> None:
        name = parse_nodes("foo")[0]
        assert isinstance(name, Leaf)
        arguments = expand_arguments(foo, call_args("(b = x + 1)"), call_span)
        assert render(build_call(foo, arguments, name.token, call_span)) == "foo(1, x + 1, 3)"

    def test_comments_after_arguments_kept(self) -> None:
        f = declare("f(a, b)")
        name, group = parse_nodes("f(a = x /* keep */, b = y // note\n)")
        assert isinstance(name, Leaf) and isinstance(group, Group)
        assert render(expand_call(f, name.token, group)) == "f(x /* keep */, y // note\n)"

    def test_comment_in_empty_call_kept(self) -> None:
        baz = declare("baz()")
        name, group = parse_nodes("baz( /* none */ )")
        assert isinstance(name, Leaf) and isinstance(group, Group)
        assert render(expand_call(baz, name.token, group)) == "baz( /* none */ )"

    def test_trailing_comma_keeps_close_trivia(self, foo) -> None:
        name, group = parse_nodes("foo(5, // last\n)")
        assert isinstance(name, Leaf) and isinstance(group, Group)
        assert render(expand_call(foo, name.token, group)) == "foo(5, 2, 3 // last\n)"
