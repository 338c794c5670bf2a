"""
MASH CLI Entrypoint.

Command-line front end for the MASH tokenizer and parser.

Features:
    - Read source from `.mash`/`.py` files or inline strings.
    - Tokenize and parse, then print the token list and/or statement tree.
    - Emit JSON instead of Python reprs with `--json`.
    - Report diagnostics on stderr.
    - Launch an interactive REPL.

Example usage:
    mash hello.mash
    mash -s "x, y = 1, 2" --tokens
    mash script.py --json
    mash --repl

Exit status:
    0  source parsed cleanly
    1  diagnostics were reported
    2  inconsistent indentation or unreadable input

Functions:
    run_mash(source: str, is_string: bool = False, show_tokens: bool = False,
             show_ast: bool = True, as_json: bool = False) -> int:
        Runs the full pipeline (tokenize -> parse -> print) and returns the exit status.

    main() -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import pprint
import sys

from mash.mash_ast import Stmt
from mash.mash_diagnostics import Diagnostics, TokenizeError
from mash.mash_lexer import CharacterStream, Lexer, Token
from mash.mash_parser import Parser

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".mash", ".py")


def format_tokens(tokens: list[Token], as_json: bool = False) -> str:
    if as_json:
        return json.dumps([tok.to_dict() for tok in tokens], indent=2)
    return "\n".join(f"{tok.line}:{tok.col}\t{tok!r}" for tok in tokens)


def format_statements(statements: list[Stmt], as_json: bool = False) -> str:
    if as_json:
        return json.dumps([stmt.to_dict() for stmt in statements], indent=2)
    return "\n".join(pprint.pformat(stmt) for stmt in statements)


def print_diagnostics(diagnostics: Diagnostics, origin: str = "<string>") -> None:
    for diagnostic in diagnostics:
        print(f"{origin}:{diagnostic}", file=sys.stderr)


def run_mash(
    source: str,
    is_string: bool = False,
    show_tokens: bool = False,
    show_ast: bool = True,
    as_json: bool = False,
) -> int:
    """
    Run the MASH front end over a file or a raw source string.

    Args:
        source (str): The source code or path to a `.mash`/`.py` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        show_tokens (bool): Print the token list.
        show_ast (bool): Print the parsed statements.
        as_json (bool): Print JSON instead of Python reprs.

    Returns:
        int: Process exit status (0 clean, 1 diagnostics, 2 fatal).

    Raises:
        ValueError: If `is_string` is False and the path has an unsupported suffix.
    """
    origin = "<string>"
    if not is_string:
        if not source.endswith(SOURCE_SUFFIXES):
            raise ValueError("Only .mash and .py files are supported.")
        origin = source
        try:
            with open(source, encoding="utf-8") as f:
                source = f.read()
        except OSError as e:
            print(f"{origin}: cannot read source: {e}", file=sys.stderr)
            return 2

    diagnostics = Diagnostics()

    try:
        tokens = Lexer(CharacterStream(source), diagnostics).analyze()
    except TokenizeError as e:
        print_diagnostics(diagnostics, origin)
        print(f"{origin}:{e.line}:{e.col}: {e.message}", file=sys.stderr)
        return 2

    if show_tokens:
        print(format_tokens(tokens, as_json))

    statements = Parser(tokens, diagnostics).parse()
    logger.debug("parsed %d statements from %s", len(statements), origin)

    if show_ast:
        print(format_statements(statements, as_json))

    print_diagnostics(diagnostics, origin)
    return 1 if diagnostics.has_errors else 0


def main() -> None:
    """
    Entry point for the MASH CLI.

    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise tokenizes and parses the given file or string and exits with
      the status returned by `run_mash`.
    """
    if len(sys.argv) == 1:
        from mash.mash_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="mash")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token list"
    )
    parser.add_argument(
        "--no-ast",
        dest="show_ast",
        action="store_false",
        help="Do not print the parsed statements",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a file",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.repl or args.source is None:
        from mash.mash_repl import start_repl

        start_repl(show_tokens=args.tokens, as_json=args.json)
        return

    status = run_mash(
        source=args.source,
        is_string=args.string,
        show_tokens=args.tokens,
        show_ast=args.show_ast,
        as_json=args.json,
    )
    sys.exit(status)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
