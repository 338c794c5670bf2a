"""
Interactive session for the MASH front end.

Reads source a unit at a time, tokenizes and parses it, and prints the
resulting statements (and any diagnostics). A line ending in `:` opens a
block; the block is finished by an empty line, as in the Python REPL.
"""

import logging

from mash.mash_cli import format_statements, format_tokens
from mash.mash_diagnostics import Diagnostics, TokenizeError
from mash.mash_lexer import CharacterStream, Lexer
from mash.mash_parser import Parser

logger = logging.getLogger(__name__)

PROMPT = ">>> "
CONTINUATION_PROMPT = "... "


def opens_block(line: str) -> bool:
    code = line.split("#", 1)[0].rstrip()
    return code.endswith(":")


def read_unit() -> str | None:
    """Reads one complete unit of input.

    Returns:
        str | None: The buffered source, or None when the user asked to leave.
    """
    lines: list[str] = []
    in_block = False
    while True:
        try:
            line = input(CONTINUATION_PROMPT if lines else PROMPT)
        except EOFError:
            return "\n".join(lines) + "\n" if lines else None

        if not lines and line.strip() in ("exit", "quit"):
            return None
        if in_block and not line.strip():
            break
        if not lines and not line.strip():
            return ""

        lines.append(line)
        if opens_block(line):
            in_block = True
        if not in_block:
            break
    return "\n".join(lines) + "\n"


def run_unit(source: str, show_tokens: bool = False, as_json: bool = False) -> str:
    """Tokenizes and parses one unit and returns the text to display."""
    diagnostics = Diagnostics()
    try:
        tokens = Lexer(CharacterStream(source), diagnostics).analyze()
    except TokenizeError as e:
        return f"[error] >>> {e}"

    out: list[str] = []
    if show_tokens:
        out.append(format_tokens(tokens, as_json))
    statements = Parser(tokens, diagnostics).parse()
    if statements:
        out.append(format_statements(statements, as_json))
    out.extend(f"[error] >>> {d}" for d in diagnostics)
    return "\n".join(out)


def start_repl(show_tokens: bool = False, as_json: bool = False) -> None:
    print("MASH REPL. Type 'exit' or 'quit' to leave.")
    while True:
        try:
            source = read_unit()
        except KeyboardInterrupt:
            print()
            continue
        if source is None:
            print("Exiting MASH REPL.")
            return
        if not source.strip():
            continue
        logger.debug("read unit of %d characters", len(source))
        output = run_unit(source, show_tokens, as_json)
        if output:
            print(output)
