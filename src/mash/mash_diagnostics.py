"""
Diagnostics and error types for the MASH front end.

Recoverable problems (a bad escape, an unterminated string, a statement the
parser had to drop) are recorded in a `Diagnostics` collector handed to the
lexer and parser. The host decides how to show them; every report is also
forwarded to the standard `logging` module.

Conditions that make the rest of a source unit meaningless are raised as
exceptions instead.

Classes:
    MashError: Base class for all front-end exceptions.
    TokenizeError: Raised by the lexer for fatal conditions.
    InconsistentIndentationError: A dedent to a width not on the indent stack.
    ParseError: Raised inside the parser when a production cannot continue.
    Diagnostic: A single recorded problem with its source position.
    Diagnostics: Ordered collector of `Diagnostic` records.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Library code: reports reach a handler only if the host configures one.
logging.getLogger("mash").addHandler(logging.NullHandler())


class MashError(Exception):
    """Base class for front-end errors.

    Attributes:
        message (str): Human-readable description.
        offset (int): Code-point offset into the source, or -1 if unknown.
        line (int): 1-based line number, 0 if unknown.
        col (int): 1-based column number, 0 if unknown.
    """

    def __init__(self, message: str, offset: int = -1, line: int = 0, col: int = 0):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.line = line
        self.col = col

    def __str__(self) -> str:
        if self.line:
            return f"{self.message} at line {self.line}, col {self.col}"
        return self.message


class TokenizeError(MashError):
    pass


class InconsistentIndentationError(TokenizeError):
    """Raised when a dedent lands on a width that no enclosing block uses.

    Attributes:
        width (int): The measured width of the offending line.
        stack (tuple[int, ...]): Indent stack at the moment of failure.
    """

    def __init__(
        self,
        width: int,
        stack: tuple[int, ...],
        offset: int = -1,
        line: int = 0,
        col: int = 0,
    ):
        super().__init__(
            f"Inconsistent indentation: width {width} matches no enclosing block {list(stack)}",
            offset,
            line,
            col,
        )
        self.width = width
        self.stack = stack


class ParseError(MashError):
    pass


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem found while tokenizing or parsing."""

    message: str
    offset: int = -1
    line: int = 0
    col: int = 0
    phase: str = "parse"

    def __str__(self) -> str:
        if self.line:
            return f"{self.line}:{self.col}: {self.message}"
        return self.message


class Diagnostics:
    """Ordered collection of diagnostics shared by one lexer/parser run.

    Example:
        >>> diags = Diagnostics()
        >>> _ = diags.report("Unexpected character '$'", offset=3, line=1, col=4, phase="lex")
        >>> diags.messages()
        ["Unexpected character '$'"]
    """

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def report(
        self,
        message: str,
        offset: int = -1,
        line: int = 0,
        col: int = 0,
        phase: str = "parse",
    ) -> Diagnostic:
        diagnostic = Diagnostic(message, offset, line, col, phase)
        self._items.append(diagnostic)
        logger.warning("%s error: %s", phase, diagnostic)
        return diagnostic

    def report_error(self, error: MashError, phase: str = "parse") -> Diagnostic:
        return self.report(error.message, error.offset, error.line, error.col, phase)

    def messages(self) -> list[str]:
        return [d.message for d in self._items]

    def clear(self) -> None:
        self._items.clear()

    @property
    def has_errors(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Diagnostic:
        return self._items[index]

    def __repr__(self) -> str:
        return f"Diagnostics({self._items!r})"


__all__ = [
    "Diagnostic",
    "Diagnostics",
    "InconsistentIndentationError",
    "MashError",
    "ParseError",
    "TokenizeError",
]
