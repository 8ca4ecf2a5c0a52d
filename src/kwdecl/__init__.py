"""
kwdecl - keyword arguments and defaults for positional-only call sites.

Declare a parameter list once, then call the declared name with any mix of
positional and `name = value` arguments; kwdecl rewrites every call into the
positional form in declared order:

    declare foo(a = 1, b = 2, c = 3)
    foo(c = 30, a = 10)      // becomes foo(10, 2, 30)
"""

from __future__ import annotations

from ._version import get_version
from .core import (
    Declaration,
    DeclarationRegistry,
    Diagnostic,
    KwdeclError,
    Parameter,
    RewriteResult,
    RewriteSession,
    parse_declaration,
)

__version__ = get_version()

__all__ = [
    "Declaration",
    "DeclarationRegistry",
    "Diagnostic",
    "KwdeclError",
    "Parameter",
    "RewriteResult",
    "RewriteSession",
    "__version__",
    "parse_declaration",
]
