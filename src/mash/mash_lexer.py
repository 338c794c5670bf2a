"""
Lexical analyzer for the MASH scripting language.

This module converts raw source text into a flat list of tokens, turning
leading whitespace into synthetic INDENT/DEDENT tokens the parser uses as
block delimiters.

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    LiteralValue: Decoded payload carried by identifier, string and number tokens.
    Token: A single token with kind, literal payload and source span.
    Lexer: Converts a CharacterStream into a complete token list.

Features:
    - Skips spaces, tabs, carriage returns and `#` comments
    - Resolves two-character operators (`**`, `==`, `!=`, `<=`, `>=`) with one
      character of lookahead
    - Recognizes identifiers and keywords, integers and floats, and quoted
      strings with escape sequences
    - Tracks an indentation stack and emits NEWLINE, INDENT and DEDENT tokens

Errors:
    Recoverable problems (unterminated strings, unknown escapes, unexpected
    characters) are reported to a `Diagnostics` collector and lexing goes on.
    A dedent to a width that matches no enclosing block raises
    `InconsistentIndentationError`.

Example:
    >>> [tok.kind.name for tok in analyze("x = 1")]
    ['IDENTIFIER', 'EQUAL', 'INT', 'EOF']

Exports:
    - CharacterStream
    - LiteralValue, IdentifierLiteral, StringLiteral, IntLiteral, FloatLiteral
    - Token
    - TokenKind
    - Lexer
    - analyze
    - KEYWORDS
"""

import logging
from dataclasses import dataclass
from typing import Any

from mash.mash_constants import (
    INT_MAX,
    KEYWORDS,
    TAB_WIDTH,
    TokenKind,
    double_char_tokens,
    escape_map,
    single_char_tokens,
)
from mash.mash_diagnostics import (
    Diagnostics,
    InconsistentIndentationError,
    TokenizeError,
)

logger = logging.getLogger(__name__)


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            TokenizeError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise TokenizeError(
                "Attempted to read past end of source",
                self.position,
                self.line,
                self.column,
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def current(self) -> str | None:
        return self.source[self.position] if self.position < len(self.source) else None

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


@dataclass(frozen=True)
class LiteralValue:
    """Decoded token payload. Subclasses tag which kind of literal it is."""

    value: Any

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


@dataclass(frozen=True, repr=False)
class IdentifierLiteral(LiteralValue):
    value: str


@dataclass(frozen=True, repr=False)
class StringLiteral(LiteralValue):
    value: str


@dataclass(frozen=True, repr=False)
class IntLiteral(LiteralValue):
    value: int


@dataclass(frozen=True, repr=False)
class FloatLiteral(LiteralValue):
    value: float


class Token:
    """Represents a single lexical token.

    Attributes:
        kind (TokenKind): The token category.
        literal (LiteralValue | None): Decoded payload for identifiers, strings and numbers.
        start (int): Offset of the first character of the token.
        end (int): Offset one past the last character of the token.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    __slots__ = ("kind", "literal", "start", "end", "line", "col")

    def __init__(
        self,
        kind: TokenKind,
        literal: LiteralValue | None = None,
        start: int = 0,
        end: int = 0,
        line: int = 0,
        col: int = 0,
    ):
        self.kind = kind
        self.literal = literal
        self.start = start
        self.end = end
        self.line = line
        self.col = col

    @property
    def value(self) -> Any:
        """The decoded literal value, or None for tokens without a payload."""
        return self.literal.value if self.literal is not None else None

    @property
    def span(self) -> tuple[int, int, int]:
        return (self.start, self.end, self.line)

    def __repr__(self) -> str:
        if self.literal is None:
            return f"Token({self.kind.name})"
        return f"Token({self.kind.name}, {self.literal.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.literal == other.literal
            and self.start == other.start
            and self.end == other.end
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.literal, self.start, self.end, self.line, self.col))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.name,
            "literal": self.value,
            "start": self.start,
            "end": self.end,
            "line": self.line,
            "col": self.col,
        }


def _is_digit(ch: str) -> bool:
    return len(ch) == 1 and "0" <= ch <= "9"


class Lexer:
    """Lexical analyzer for the MASH language.

    Consumes a CharacterStream in one pass and produces the full token list,
    always terminated by a single EOF token.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        diagnostics (Diagnostics): Sink for recoverable lexical problems.
        indent_stack (list[int]): Widths of the enclosing blocks, strictly increasing.
        tokens (list[Token]): Tokens produced so far.
    """

    def __init__(
        self, stream: CharacterStream, diagnostics: Diagnostics | None = None
    ) -> None:
        self.stream = stream
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.indent_stack: list[int] = [0]
        self.tokens: list[Token] = []
        self.start = stream.position
        self.start_line = stream.line
        self.start_col = stream.column

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def match_advance(self, expected: str) -> bool:
        """Consumes the next character only if it equals `expected`."""
        if self.stream.end_of_file() or self.peek() != expected:
            return False
        self.advance()
        return True

    def mark(self) -> None:
        """Records the current position as the start of the next token."""
        self.start = self.stream.position
        self.start_line = self.stream.line
        self.start_col = self.stream.column

    def add_token(self, kind: TokenKind, literal: LiteralValue | None = None) -> None:
        self.tokens.append(
            Token(
                kind,
                literal,
                self.start,
                self.stream.position,
                self.start_line,
                self.start_col,
            )
        )

    def report(self, message: str) -> None:
        self.diagnostics.report(
            message, self.start, self.start_line, self.start_col, phase="lex"
        )

    def analyze(self) -> list[Token]:
        """Tokenizes the whole stream.

        Returns:
            list[Token]: All tokens, ending with exactly one EOF token.

        Raises:
            InconsistentIndentationError: If a line dedents to an unknown width.
        """
        if self.tokens and self.tokens[-1].kind is TokenKind.EOF:
            return self.tokens

        self.mark()
        self.handle_indentation()

        while not self.stream.end_of_file():
            self.mark()
            self.lex()

        self.mark()
        self.add_token(TokenKind.EOF)
        return self.tokens

    def lex(self) -> None:
        ch = self.advance()

        if ch in double_char_tokens:
            second, long_kind, short_kind = double_char_tokens[ch]
            self.add_token(long_kind if self.match_advance(second) else short_kind)
        elif ch in single_char_tokens:
            self.add_token(single_char_tokens[ch])
        elif ch == "#":
            self.skip_comment()
        elif ch in ('"', "'"):
            self.lex_string(ch)
        elif ch == "\n":
            self.tokens.append(
                Token(
                    TokenKind.NEWLINE,
                    None,
                    self.start,
                    self.start,
                    self.start_line,
                    self.start_col,
                )
            )
            self.handle_indentation()
        elif ch in " \t\r":
            pass
        elif _is_digit(ch):
            self.lex_number()
        elif ch.isalpha() or ch == "_":
            self.lex_identifier()
        else:
            self.report(f"Unexpected character {ch!r}")

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def handle_indentation(self) -> None:
        """Measures the next line's indent and emits INDENT/DEDENT tokens.

        Blank and comment-only lines are left alone. End of input counts as
        width 0, closing every open block.
        """
        width = 0
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == " ":
                width += 1
            elif ch == "\t":
                width += TAB_WIDTH
            elif ch in ("\n", "#"):
                return
            elif not ch.isspace():
                break
            self.advance()
        else:
            width = 0

        self.mark()
        top = self.indent_stack[-1]

        if width > top:
            self.indent_stack.append(width)
            self.add_token(TokenKind.INDENT)
            logger.debug("indent to %d at line %d", width, self.start_line)
        elif width < top:
            while width < self.indent_stack[-1]:
                self.indent_stack.pop()
                self.add_token(TokenKind.DEDENT)
            logger.debug("dedent to %d at line %d", width, self.start_line)
            if self.indent_stack[-1] != width:
                raise InconsistentIndentationError(
                    width,
                    tuple(self.indent_stack),
                    self.start,
                    self.start_line,
                    self.start_col,
                )

    def lex_number(self) -> None:
        while _is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and _is_digit(self.peek(1)):
            self.advance()
            while _is_digit(self.peek()):
                self.advance()
            text = self.stream.source[self.start : self.stream.position]
            self.add_token(TokenKind.FLOAT, FloatLiteral(float(text)))
        else:
            text = self.stream.source[self.start : self.stream.position]
            value = int(text)
            if value > INT_MAX:
                self.report(f"Integer literal out of range: {text}")
            self.add_token(TokenKind.INT, IntLiteral(value))

    def lex_identifier(self) -> None:
        while self.peek().isalnum() or self.peek() == "_":
            self.advance()

        text = self.stream.source[self.start : self.stream.position]
        kind = KEYWORDS.get(text)
        if kind is not None:
            self.add_token(kind)
        else:
            self.add_token(TokenKind.IDENTIFIER, IdentifierLiteral(text))

    def lex_string(self, quote: str) -> None:
        """Scans a string body after its opening quote.

        An embedded newline or end of input before the closing quote drops the
        token. The newline itself is left in the stream.
        """
        chars: list[str] = []
        while True:
            ch = self.peek()
            if ch == "" or ch == "\n":
                self.report("Unterminated string")
                return
            self.advance()
            if ch == quote:
                break
            if ch != "\\":
                chars.append(ch)
                continue

            escaped = self.peek()
            if escaped == "" or escaped == "\n":
                self.report("Unterminated string")
                return
            self.advance()
            if escaped in ('"', "'"):
                chars.append(escaped)
            elif escaped in escape_map:
                chars.append(escape_map[escaped])
            else:
                self.report(f"Unknown escape sequence: \\{escaped}")
                chars.append(escaped)

        self.add_token(TokenKind.STRING, StringLiteral("".join(chars)))


def analyze(source: str, diagnostics: Diagnostics | None = None) -> list[Token]:
    """Tokenizes `source` and returns the complete token list."""
    return Lexer(CharacterStream(source), diagnostics).analyze()


__all__ = [
    "KEYWORDS",
    "CharacterStream",
    "FloatLiteral",
    "IdentifierLiteral",
    "IntLiteral",
    "Lexer",
    "LiteralValue",
    "StringLiteral",
    "Token",
    "TokenKind",
    "analyze",
]
