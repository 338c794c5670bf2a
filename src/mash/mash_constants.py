"""
Shared constants for the MASH front end.

Defines the closed set of token kinds and the static lookup tables the lexer
and parser consult: keywords, single/double character operators and string
escapes. All tables are built once at import time and exposed read-only, so
several lexers may share them freely.

Exports:
    - TokenKind
    - KEYWORDS
    - single_char_tokens
    - double_char_tokens
    - escape_map
    - TAB_WIDTH
    - INT_MAX
    - MAX_NESTING_DEPTH
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping

# A tab always counts as this many columns when measuring indentation.
TAB_WIDTH = 4

# Integer literals are 64-bit signed.
INT_MAX = 2**63 - 1

# Expression and block nesting the parser accepts before giving up.
MAX_NESTING_DEPTH = 30


class TokenKind(Enum):
    # Operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    STAR_STAR = "**"
    LESS = "<"
    GREATER = ">"
    EQUAL = "="
    EQUAL_EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    AMPERSAND = "&"
    PIPE = "|"
    CARET = "^"
    TILDE = "~"

    # Delimiters
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"
    COMMA = ","
    COLON = ":"
    DOT = "."
    SEMICOLON = ";"
    BACKSLASH = "\\"

    # Literals
    IDENTIFIER = "identifier"
    STRING = "string"
    INT = "int"
    FLOAT = "float"

    # Keywords
    AND = "and"
    OR = "or"
    NOT = "not"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    WHILE = "while"
    FOR = "for"
    IN = "in"
    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"
    DEF = "def"
    CLASS = "class"
    PASS = "pass"
    IMPORT = "import"
    FROM = "from"
    PRINT = "print"
    GLOBAL = "global"
    DEL = "del"
    TRY = "try"
    EXCEPT = "except"
    RAISE = "raise"
    IS = "is"
    LAMBDA = "lambda"

    # Structure
    INDENT = "<indent>"
    DEDENT = "<dedent>"
    NEWLINE = "<newline>"
    EOF = "<eof>"

    def __repr__(self) -> str:
        return f"TokenKind.{self.name}"


_keyword_kinds = (
    TokenKind.AND,
    TokenKind.OR,
    TokenKind.NOT,
    TokenKind.IF,
    TokenKind.ELIF,
    TokenKind.ELSE,
    TokenKind.WHILE,
    TokenKind.FOR,
    TokenKind.IN,
    TokenKind.BREAK,
    TokenKind.CONTINUE,
    TokenKind.RETURN,
    TokenKind.DEF,
    TokenKind.CLASS,
    TokenKind.PASS,
    TokenKind.IMPORT,
    TokenKind.FROM,
    TokenKind.PRINT,
    TokenKind.GLOBAL,
    TokenKind.DEL,
    TokenKind.TRY,
    TokenKind.EXCEPT,
    TokenKind.RAISE,
    TokenKind.IS,
    TokenKind.LAMBDA,
)

KEYWORDS: Mapping[str, TokenKind] = MappingProxyType(
    {kind.value: kind for kind in _keyword_kinds}
)

# Characters that always form a token on their own.
single_char_tokens: Mapping[str, TokenKind] = MappingProxyType(
    {
        "+": TokenKind.PLUS,
        "-": TokenKind.MINUS,
        "/": TokenKind.SLASH,
        "%": TokenKind.PERCENT,
        "&": TokenKind.AMPERSAND,
        "|": TokenKind.PIPE,
        "^": TokenKind.CARET,
        "~": TokenKind.TILDE,
        "(": TokenKind.LPAREN,
        ")": TokenKind.RPAREN,
        "[": TokenKind.LBRACKET,
        "]": TokenKind.RBRACKET,
        "{": TokenKind.LBRACE,
        "}": TokenKind.RBRACE,
        ",": TokenKind.COMMA,
        ":": TokenKind.COLON,
        ".": TokenKind.DOT,
        ";": TokenKind.SEMICOLON,
        "\\": TokenKind.BACKSLASH,
    }
)

# first char -> (second char, two-char kind, fallback one-char kind)
double_char_tokens: Mapping[str, tuple[str, TokenKind, TokenKind]] = MappingProxyType(
    {
        "*": ("*", TokenKind.STAR_STAR, TokenKind.STAR),
        "=": ("=", TokenKind.EQUAL_EQUAL, TokenKind.EQUAL),
        "!": ("=", TokenKind.NOT_EQUAL, TokenKind.NOT),
        "<": ("=", TokenKind.LESS_EQUAL, TokenKind.LESS),
        ">": ("=", TokenKind.GREATER_EQUAL, TokenKind.GREATER),
    }
)

# The active quote character is handled separately by the lexer.
escape_map: Mapping[str, str] = MappingProxyType(
    {
        "n": "\n",
        "t": "\t",
        "r": "\r",
        "\\": "\\",
    }
)

# Kinds carrying no source text of their own.
structural_tokens = frozenset(
    {TokenKind.INDENT, TokenKind.DEDENT, TokenKind.NEWLINE, TokenKind.EOF}
)

__all__ = [
    "INT_MAX",
    "KEYWORDS",
    "MAX_NESTING_DEPTH",
    "TAB_WIDTH",
    "TokenKind",
    "double_char_tokens",
    "escape_map",
    "single_char_tokens",
    "structural_tokens",
]
