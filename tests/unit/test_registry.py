"""Tests for the declaration registry and its redeclaration policies."""

from __future__ import annotations

import logging

import pytest
from conftest import declare

from kwdecl.core.errors import RedeclarationError
from kwdecl.core.registry import DeclarationRegistry, RedeclarationPolicy


class TestRegistry:
    """Insert and lookup."""

    def test_lookup_missing(self) -> None:
        assert DeclarationRegistry().lookup("foo") is None

    def test_insert_and_lookup(self) -> None:
        registry = DeclarationRegistry()
        decl = declare("foo(a = 1)")
        registry.insert(decl)
        assert registry.lookup("foo") is decl
        assert "foo" in registry
        assert len(registry) == 1

    def test_iteration_in_insertion_order(self) -> None:
        registry = DeclarationRegistry()
        for source in ("b(x)", "a(y)", "c()"):
            registry.insert(declare(source))
        assert registry.names() == ["b", "a", "c"]
        assert [d.name for d in registry] == ["b", "a", "c"]

    def test_registries_are_independent(self) -> None:
        first, second = DeclarationRegistry(), DeclarationRegistry()
        first.insert(declare("foo()"))
        assert "foo" not in second


class TestRedeclaration:
    """Redeclaring a name follows the configured policy."""

    def test_overwrite_is_default_and_silent(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = DeclarationRegistry()
        registry.insert(declare("foo(a)"))
        with caplog.at_level(logging.WARNING, logger="kwdecl.core.registry"):
            registry.insert(declare("foo(b)"))
        assert registry.lookup("foo").parameter_names == ["b"]
        assert len(registry) == 1
        assert caplog.records == []

    def test_warn_overwrites_and_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = DeclarationRegistry(RedeclarationPolicy.WARN)
        registry.insert(declare("foo(a)"))
        with caplog.at_level(logging.WARNING, logger="kwdecl.core.registry"):
            registry.insert(declare("foo(b)"))
        assert registry.lookup("foo").parameter_names == ["b"]
        assert "Redeclaration of foo(b)" in caplog.text

    def test_error_keeps_first(self) -> None:
        registry = DeclarationRegistry(RedeclarationPolicy.ERROR)
        registry.insert(declare("foo(a)"))
        with pytest.raises(RedeclarationError, match="`foo` is already declared"):
            registry.insert(declare("foo(b)"))
        assert registry.lookup("foo").parameter_names == ["a"]

    def test_policy_from_string(self) -> None:
        assert DeclarationRegistry("error").policy == RedeclarationPolicy.ERROR
