"""
kwdecl core: tokens, declarations, the registry, and call expansion.
"""

from .declaration import Declaration, Parameter, parse_declaration
from .diagnostics import Diagnostic
from .errors import (
    ArityExceeded,
    ConfigError,
    DeclarationSyntaxError,
    DiagnosticError,
    DiagnosticKind,
    EmptyArgumentValue,
    KwdeclError,
    MissingRequiredArgument,
    OrderingViolation,
    RedeclarationError,
    TokenizeError,
    UnknownArgumentName,
)
from .expander import build_call, expand_arguments, expand_call
from .registry import DeclarationRegistry, RedeclarationPolicy
from .session import RewriteResult, RewriteSession

__all__ = [
    "ArityExceeded",
    "ConfigError",
    "Declaration",
    "DeclarationRegistry",
    "DeclarationSyntaxError",
    "Diagnostic",
    "DiagnosticError",
    "DiagnosticKind",
    "EmptyArgumentValue",
    "KwdeclError",
    "MissingRequiredArgument",
    "OrderingViolation",
    "Parameter",
    "RedeclarationError",
    "RedeclarationPolicy",
    "RewriteResult",
    "RewriteSession",
    "TokenizeError",
    "UnknownArgumentName",
    "build_call",
    "expand_arguments",
    "expand_call",
    "parse_declaration",
]
