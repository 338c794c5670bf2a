import builtins
from collections.abc import Iterator

import pytest

from mash.mash_repl import opens_block, read_unit, run_unit, start_repl


def feed(monkeypatch: pytest.MonkeyPatch, lines: list[str]) -> list[str]:
    """Replaces `input` with a scripted sequence; returns the prompts seen."""
    prompts: list[str] = []
    it: Iterator[str] = iter(lines)

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


def test_repl_quit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["quit"])
    start_repl()
    out = capsys.readouterr().out
    assert "Exiting MASH REPL" in out


def test_repl_exit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["exit"])
    start_repl()
    assert "Exiting MASH REPL" in capsys.readouterr().out


def test_repl_eof_leaves(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, [])
    start_repl()
    assert "Exiting MASH REPL" in capsys.readouterr().out


def test_repl_empty_input_skipped(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["   ", "quit"])
    start_repl()
    out = capsys.readouterr().out
    assert "[error]" not in out
    assert "Exiting MASH REPL" in out


def test_repl_single_line(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["x = 1", "quit"])
    start_repl()
    assert "NameTarget(name='x')" in capsys.readouterr().out


def test_repl_block_until_empty_line(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ["def f():", "    return 1", "", "quit"])
    start_repl()
    out = capsys.readouterr().out
    assert "FunctionDef(name='f'" in out
    assert "[error]" not in out
    assert prompts == [">>> ", "... ", "... ", ">>> "]


def test_repl_reports_indentation_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["if x:", "        a", "    b", "", "quit"])
    start_repl()
    assert "[error] >>> Inconsistent indentation" in capsys.readouterr().out


def test_repl_shows_tokens(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, ["y", "quit"])
    start_repl(show_tokens=True)
    assert "Token(IDENTIFIER, 'y')" in capsys.readouterr().out


def test_repl_survives_keyboard_interrupt(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    responses = iter([KeyboardInterrupt(), "quit"])

    def fake_input(prompt: str) -> str:
        item = next(responses)
        if isinstance(item, BaseException):
            raise item
        return item

    monkeypatch.setattr(builtins, "input", fake_input)
    start_repl()
    assert "Exiting MASH REPL" in capsys.readouterr().out


def test_read_unit_eof_inside_block(monkeypatch: pytest.MonkeyPatch) -> None:
    feed(monkeypatch, ["while x:", "    pass"])
    assert read_unit() == "while x:\n    pass\n"


def test_read_unit_empty_line(monkeypatch: pytest.MonkeyPatch) -> None:
    feed(monkeypatch, [""])
    assert read_unit() == ""


@pytest.mark.parametrize(  # type: ignore[misc]
    "line,expected",
    [
        ("if x:", True),
        ("else:  # trailing comment", True),
        ("x = 1", False),
        ("d = {1: 2}", False),
        ("# just a comment:", False),
    ],
)
def test_opens_block(line: str, expected: bool) -> None:
    assert opens_block(line) is expected


def test_run_unit_reports_diagnostics() -> None:
    out = run_unit("x = $\n")
    assert "[error] >>> 1:5: Unexpected character '$'" in out


def test_run_unit_json() -> None:
    out = run_unit("pass\n", as_json=True)
    assert '"kind": "Pass"' in out
