"""
Diagnostic records handed back to callers of a rewrite.

Scans abort by raising a DiagnosticError; the rewrite session converts each
one into a Diagnostic so one bad call site never stops the rest of a file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .errors import DiagnosticError, DiagnosticKind


class Diagnostic(BaseModel):
    """A located error message for one declaration or call site."""

    kind: DiagnosticKind
    message: str
    file: Path | None = Field(default=None, description="Source file, None for in-memory text")
    line: int = Field(default=1, ge=1)
    column: int = Field(default=1, ge=1)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_error(cls, error: DiagnosticError) -> Diagnostic:
        span = error.span
        if span is None:
            return cls(kind=error.kind, message=error.message)
        return cls(
            kind=error.kind,
            message=error.message,
            file=span.file,
            line=span.line,
            column=span.column,
        )

    @property
    def location(self) -> str:
        return f"{self.file or '<input>'}:{self.line}:{self.column}"

    def format(self) -> str:
        """Format as `file:line:col: error: message`."""
        return f"{self.location}: error: {self.message}"

    def __str__(self) -> str:
        return self.format()
