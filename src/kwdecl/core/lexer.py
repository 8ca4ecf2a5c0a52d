"""
Lexer/Tokenizer for kwdecl host source.

Converts raw source text into a stream of tokens with source location
tracking. Whitespace and comments are kept as trivia on the token that
follows them, so joining every token's trivia and value gives back the
original text unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from .errors import TokenizeError


class TokenType(Enum):
    """Token types in host source."""

    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    STRING = "STRING"
    PUNCT = "PUNCT"
    OPEN_DELIM = "OPEN_DELIM"
    CLOSE_DELIM = "CLOSE_DELIM"
    EOF = "EOF"


# Opening delimiter -> closing delimiter
DELIMITERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {close: open_ for open_, close in DELIMITERS.items()}

# Operators lexed as one token, so `a == b` never looks like `a =` plus `= b`
MULTI_CHAR_PUNCT = (
    "==",
    "!=",
    "<=",
    ">=",
    "=>",
    "->",
    "::",
    "&&",
    "||",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "<<",
    ">>",
    "**",
    "..",
)

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"\d(?:\w|\.(?=\d))*")
_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Span:
    """
    A source location range.

    Attributes:
        file: Source file (None for in-memory text)
        line: Line number of the first character (1-indexed)
        column: Column number of the first character (1-indexed)
        start: Offset of the first character
        end: Offset one past the last character
    """

    file: Path | None
    line: int
    column: int
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.file or '<input>'}:{self.line}:{self.column}"

    def to(self, other: Span) -> Span:
        """Span covering from the start of this span to the end of `other`."""
        return replace(self, end=other.end)


@dataclass(frozen=True)
class Token:
    """
    A single token of host source.

    Attributes:
        type: Type of token
        value: Exact source text of the token
        span: Location of the token
        trivia: Whitespace and comments immediately preceding the token
    """

    type: TokenType
    value: str
    span: Span
    trivia: str = ""

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.span.line}:{self.span.column})"

    def is_punct(self, value: str) -> bool:
        return self.type == TokenType.PUNCT and self.value == value

    def with_trivia(self, trivia: str) -> Token:
        return replace(self, trivia=trivia)


class Lexer:
    """
    Lexer for host source.

    Produces identifiers, numbers, strings, delimiters and punctuation, ending
    with an EOF token that carries any trailing trivia.
    """

    def __init__(self, text: str, file: Path | None = None):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self, count: int = 1) -> None:
        """Move forward `count` characters, updating line/column."""
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def span_from(self, start: int, line: int, column: int) -> Span:
        return Span(file=self.file, line=line, column=column, start=start, end=self.pos)

    def error(self, message: str, start: int, line: int, column: int) -> TokenizeError:
        return TokenizeError(message, Span(self.file, line, column, start, start + 1))

    def read_trivia(self) -> str:
        """Consume whitespace and comments, returning them verbatim."""
        start = self.pos
        while True:
            m = _SPACE_RE.match(self.text, self.pos)
            if m:
                self.advance(m.end() - self.pos)
                continue
            if self.current_char() == "/" and self.peek_char() == "/":
                while self.current_char() is not None and self.current_char() != "\n":
                    self.advance()
                continue
            if self.current_char() == "/" and self.peek_char() == "*":
                self.skip_block_comment()
                continue
            break
        return self.text[start : self.pos]

    def skip_block_comment(self) -> None:
        """Skip a /* ... */ comment."""
        start, line, column = self.pos, self.line, self.column
        end = self.text.find("*/", self.pos + 2)
        if end < 0:
            raise self.error("Unterminated block comment", start, line, column)
        self.advance(end + 2 - self.pos)

    def read_string(self) -> None:
        """Read a quoted string, leaving the quotes and escapes in place."""
        start, line, column = self.pos, self.line, self.column
        quote = self.current_char()
        self.advance()

        while True:
            current = self.current_char()
            if current is None or current == "\n":
                raise self.error("Unterminated string literal", start, line, column)
            if current == "\\":
                self.advance(2)
                continue
            self.advance()
            if current == quote:
                return

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            TokenizeError: If a literal or comment is unterminated
        """
        while True:
            trivia = self.read_trivia()
            ch = self.current_char()

            start, line, column = self.pos, self.line, self.column

            if ch is None:
                self.tokens.append(
                    Token(TokenType.EOF, "", self.span_from(start, line, column), trivia)
                )
                return self.tokens

            if ch.isalpha() or ch == "_":
                m = _IDENT_RE.match(self.text, self.pos)
                # Non-ASCII letters fall through to single-character punctuation
                if m:
                    self.advance(m.end() - self.pos)
                    token_type = TokenType.IDENTIFIER
                else:
                    self.advance()
                    token_type = TokenType.PUNCT

            elif ch.isdigit():
                m = _NUMBER_RE.match(self.text, self.pos)
                # Digits outside \d, such as superscripts, lex as punctuation
                if m:
                    self.advance(m.end() - self.pos)
                    token_type = TokenType.NUMBER
                else:
                    self.advance()
                    token_type = TokenType.PUNCT

            elif ch in ('"', "'"):
                self.read_string()
                token_type = TokenType.STRING

            elif ch in DELIMITERS:
                self.advance()
                token_type = TokenType.OPEN_DELIM

            elif ch in CLOSERS:
                self.advance()
                token_type = TokenType.CLOSE_DELIM

            else:
                two = self.text[self.pos : self.pos + 2]
                self.advance(2 if two in MULTI_CHAR_PUNCT else 1)
                token_type = TokenType.PUNCT

            self.tokens.append(
                Token(
                    token_type,
                    self.text[start : self.pos],
                    self.span_from(start, line, column),
                    trivia,
                )
            )


def tokenize(text: str, file: Path | None = None) -> list[Token]:
    """
    Convenience function to tokenize host source.

    Args:
        text: Source text
        file: Source file path

    Returns:
        List of tokens
    """
    lexer = Lexer(text, file)
    return lexer.tokenize()
