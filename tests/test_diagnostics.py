import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from mash.mash_diagnostics import (
    Diagnostic,
    Diagnostics,
    InconsistentIndentationError,
    MashError,
    ParseError,
    TokenizeError,
)


def test_report_records_in_order(diagnostics: Diagnostics) -> None:
    first = diagnostics.report("first", offset=0, line=1, col=1, phase="lex")
    diagnostics.report("second", offset=5, line=2, col=3)
    assert len(diagnostics) == 2
    assert diagnostics.messages() == ["first", "second"]
    assert diagnostics[0] is first
    assert [d.phase for d in diagnostics] == ["lex", "parse"]


def test_has_errors_and_clear(diagnostics: Diagnostics) -> None:
    assert not diagnostics.has_errors
    diagnostics.report("oops")
    assert diagnostics.has_errors
    diagnostics.clear()
    assert not diagnostics.has_errors
    assert len(diagnostics) == 0


def test_report_error_copies_position(diagnostics: Diagnostics) -> None:
    error = ParseError("Expected expression", offset=4, line=1, col=5)
    recorded = diagnostics.report_error(error)
    assert recorded == Diagnostic("Expected expression", 4, 1, 5, "parse")


def test_diagnostic_str() -> None:
    assert str(Diagnostic("Unterminated string", 3, 2, 4)) == "2:4: Unterminated string"
    assert str(Diagnostic("no position")) == "no position"


def test_error_str_includes_position() -> None:
    assert str(ParseError("bad", 10, 3, 7)) == "bad at line 3, col 7"
    assert str(TokenizeError("bad")) == "bad"


def test_error_hierarchy() -> None:
    assert issubclass(InconsistentIndentationError, TokenizeError)
    assert issubclass(TokenizeError, MashError)
    assert issubclass(ParseError, MashError)


def test_inconsistent_indentation_attributes() -> None:
    error = InconsistentIndentationError(2, (0, 4), offset=12, line=3, col=3)
    assert error.width == 2
    assert error.stack == (0, 4)
    assert error.offset == 12
    assert error.message == (
        "Inconsistent indentation: width 2 matches no enclosing block [0, 4]"
    )


def test_inconsistent_indentation_is_raisable() -> None:
    with pytest.raises(TokenizeError, match="width 2"):
        raise InconsistentIndentationError(2, (0,))


def test_reports_are_logged(
    diagnostics: Diagnostics, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="mash.mash_diagnostics"):
        diagnostics.report("Unexpected character '$'", 3, 1, 4, phase="lex")
    assert "lex error: 1:4: Unexpected character '$'" in caplog.text


def test_repr(diagnostics: Diagnostics) -> None:
    diagnostics.report("x")
    assert repr(diagnostics).startswith("Diagnostics([Diagnostic(")


def test_library_use_writes_nothing_to_stderr() -> None:
    src = Path(__file__).resolve().parents[1] / "src"
    env = dict(os.environ, PYTHONPATH=str(src))
    code = (
        "from mash.mash_diagnostics import Diagnostics\n"
        "from mash.mash_parser import parse_source\n"
        "d = Diagnostics()\n"
        "parse_source('1 = 2\\n', d)\n"
        "print(len(d))\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code],
        capture_output=True,
        text=True,
        env=env,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.strip() != "0"
    assert result.stderr == ""
