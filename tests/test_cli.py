import json
import sys
from pathlib import Path
from typing import Any

import pytest

from mash import mash_cli

PROGRAM = "def add(a, b):\n    return a + b\nx = add(1, 2)\n"


def test_run_mash_string_input_prints(capsys: pytest.CaptureFixture[str]) -> None:
    status = mash_cli.run_mash(source="x = 1", is_string=True)
    out = capsys.readouterr().out
    assert status == 0
    assert "NameTarget(name='x')" in out


def test_run_mash_file_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    file_path = tmp_path / "input.mash"
    file_path.write_text(PROGRAM)
    assert mash_cli.run_mash(source=str(file_path)) == 0
    out = capsys.readouterr().out
    assert "FunctionDef(name='add'" in out


def test_run_mash_accepts_py_files(tmp_path: Path) -> None:
    file_path = tmp_path / "input.py"
    file_path.write_text("pass\n")
    assert mash_cli.run_mash(source=str(file_path), show_ast=False) == 0


def test_run_mash_rejects_unknown_suffix() -> None:
    with pytest.raises(ValueError, match="Only .mash and .py files"):
        mash_cli.run_mash(source="program.txt")


def test_run_mash_missing_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    status = mash_cli.run_mash(source=str(tmp_path / "missing.mash"))
    assert status == 2
    assert "cannot read source" in capsys.readouterr().err


def test_run_mash_reports_diagnostics(capsys: pytest.CaptureFixture[str]) -> None:
    status = mash_cli.run_mash(source="x = $", is_string=True)
    err = capsys.readouterr().err
    assert status == 1
    assert "<string>:1:5: Unexpected character '$'" in err
    assert "Expected expression" in err


def test_run_mash_inconsistent_indentation(
    capsys: pytest.CaptureFixture[str],
) -> None:
    status = mash_cli.run_mash(source="if x:\n        a\n    b\n", is_string=True)
    captured = capsys.readouterr()
    assert status == 2
    assert "Inconsistent indentation" in captured.err
    assert captured.out == ""


def test_run_mash_prints_tokens(capsys: pytest.CaptureFixture[str]) -> None:
    mash_cli.run_mash(source="x = 1", is_string=True, show_tokens=True, show_ast=False)
    out = capsys.readouterr().out
    assert "Token(IDENTIFIER, 'x')" in out
    assert "Token(EOF)" in out
    assert "Assign" not in out


def test_run_mash_json_output(capsys: pytest.CaptureFixture[str]) -> None:
    mash_cli.run_mash(source=PROGRAM, is_string=True, as_json=True)
    decoded = json.loads(capsys.readouterr().out)
    assert [stmt["kind"] for stmt in decoded] == ["FunctionDef", "Assign"]
    assert decoded[1]["value"]["kind"] == "Call"


def test_format_tokens_json() -> None:
    from mash.mash_lexer import analyze

    decoded = json.loads(mash_cli.format_tokens(analyze("x"), as_json=True))
    assert decoded[0]["kind"] == "IDENTIFIER"
    assert decoded[-1]["kind"] == "EOF"


def test_main_entry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["mash", "-s", "x = 1"])
    with pytest.raises(SystemExit) as excinfo:
        mash_cli.main()
    assert excinfo.value.code == 0


def test_main_entry_with_diagnostics(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["mash", "-s", "x = (", "--verbose"])
    with pytest.raises(SystemExit) as excinfo:
        mash_cli.main()
    assert excinfo.value.code == 1


def test_main_without_arguments_starts_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(sys, "argv", ["mash"])
    monkeypatch.setattr(
        "mash.mash_repl.start_repl", lambda **kwargs: calls.append(kwargs)
    )
    mash_cli.main()
    assert calls == [{}]


def test_main_repl_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(sys, "argv", ["mash", "--repl", "--tokens"])
    monkeypatch.setattr(
        "mash.mash_repl.start_repl", lambda **kwargs: calls.append(kwargs)
    )
    mash_cli.main()
    assert calls == [{"show_tokens": True, "as_json": False}]
