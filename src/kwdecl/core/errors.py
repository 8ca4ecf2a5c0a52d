"""
Error types for kwdecl declaration parsing, call expansion, and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .lexer import Span


class DiagnosticKind(StrEnum):
    """Kinds of diagnostics reported for declarations and call sites."""

    DECLARATION_SYNTAX = "declaration_syntax"
    UNKNOWN_ARGUMENT_NAME = "unknown_argument_name"
    ORDERING_VIOLATION = "ordering_violation"
    ARITY_EXCEEDED = "arity_exceeded"
    EMPTY_ARGUMENT_VALUE = "empty_argument_value"
    MISSING_REQUIRED_ARGUMENT = "missing_required_argument"
    REDECLARATION = "redeclaration"
    TOKENIZE = "tokenize"


class KwdeclError(Exception):
    """Base exception for all kwdecl errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigError(KwdeclError):
    """
    Raised when kwdecl.toml cannot be loaded.

    Examples:
    - Malformed TOML
    - Unknown redeclaration policy
    - Declaration keyword that is not an identifier
    """

    pass


class DiagnosticError(KwdeclError):
    """
    A located error raised while scanning one declaration or one call site.

    The rewrite session turns these into Diagnostic records so processing can
    continue with the rest of the compilation unit.
    """

    kind: DiagnosticKind = DiagnosticKind.DECLARATION_SYNTAX

    def __init__(self, message: str, span: Span | None = None):
        self.span = span
        context = None
        if span is not None:
            context = ErrorContext(file=span.file, line=span.line, column=span.column)
        super().__init__(message, context)


class TokenizeError(DiagnosticError):
    """
    Raised when source text cannot be turned into a token tree.

    Examples:
    - Unterminated string literal or block comment
    - Unbalanced or mismatched delimiters
    """

    kind = DiagnosticKind.TOKENIZE


class DeclarationSyntaxError(DiagnosticError):
    """
    Raised when a declaration statement is malformed.

    Examples:
    - Missing target identifier
    - Missing parameter list
    - Parameter entry that is neither `name` nor `name = tokens`
    - Duplicate parameter name
    """

    kind = DiagnosticKind.DECLARATION_SYNTAX


class RedeclarationError(DiagnosticError):
    """Raised when a name is declared twice under the `error` policy."""

    kind = DiagnosticKind.REDECLARATION


class UnknownArgumentName(DiagnosticError):
    """Raised when a call site names a parameter the declaration lacks."""

    kind = DiagnosticKind.UNKNOWN_ARGUMENT_NAME


class OrderingViolation(DiagnosticError):
    """Raised when a positional argument follows a keyword argument."""

    kind = DiagnosticKind.ORDERING_VIOLATION


class ArityExceeded(DiagnosticError):
    """Raised when more positional arguments are given than parameters exist."""

    kind = DiagnosticKind.ARITY_EXCEEDED


class EmptyArgumentValue(DiagnosticError):
    """Raised when `=` or `,` is followed by no argument tokens."""

    kind = DiagnosticKind.EMPTY_ARGUMENT_VALUE


class MissingRequiredArgument(DiagnosticError):
    """Raised when a parameter without a default receives no value."""

    kind = DiagnosticKind.MISSING_REQUIRED_ARGUMENT

    def __init__(self, message: str, span: Span | None = None, parameter: str = ""):
        self.parameter = parameter
        super().__init__(message, span)


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet showing the error location
    """

    file: Path | None
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "calls.kw:10:5"
        """
        location = f"{self.file or '<input>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet starts two lines before the error line
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def snippet_for(text: str, line: int) -> str:
    """Return the lines surrounding `line` (two either side) for ErrorContext."""
    lines = text.split("\n")
    start = max(0, line - 3)
    return "\n".join(lines[start : line + 2])
