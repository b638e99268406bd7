from __future__ import annotations

from pathlib import Path

import pytest


def _write(tmp_path: Path, name: str, text: str) -> None:
    (tmp_path / name).write_text(text, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("LINEBASED_EXTENSION", "LINEBASED_ROOT", "LINEBASED_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_cli_expand_prints_expanded_script(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    _write(tmp_path, "main.lb", "define greet name\n\techo Hello, $name!\ngreet Alice\n\necho done\n")

    rc = main(["expand", "--dir", str(tmp_path), "main.lb"])
    out = capsys.readouterr().out

    assert rc == 0
    assert out == "echo Hello, Alice!\n\necho done\n"


def test_cli_expand_skip_blank(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    _write(tmp_path, "main.lb", "a\n\nb\n")

    assert main(["expand", "--dir", str(tmp_path), "--skip-blank", "main.lb"]) == 0
    assert capsys.readouterr().out == "a\nb\n"


def test_cli_expand_trace_shows_locations(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    _write(tmp_path, "main.lb", "define greet name\n\techo Hello, $name!\ngreet Alice\n")

    rc = main(["expand", "--dir", str(tmp_path), "--root", "scripts", "--trace", "main.lb"])
    out = capsys.readouterr().out

    assert rc == 0
    assert out == "scripts/main.lb:3: greet@1> echo Hello, Alice!\n"


def test_cli_expand_extension_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    _write(tmp_path, "main.lb", "include lib\n")
    _write(tmp_path, "lib.lb", "echo lib\n")

    assert main(["expand", "--dir", str(tmp_path), "--extension", "lb", "main.lb"]) == 0
    assert capsys.readouterr().out == "echo lib\n"


def test_cli_expand_error_exits_nonzero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    _write(tmp_path, "main.lb", "echo ok\ninclude missing\n")

    rc = main(["expand", "--dir", str(tmp_path), "main.lb"])
    captured = capsys.readouterr()

    assert rc == 1
    assert captured.out == "echo ok\n"
    assert captured.err.startswith("main.lb:2: ")
    assert "missing.linebased" in captured.err


def test_cli_parse_prints_raw_expressions(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    _write(tmp_path, "main.lb", "# note\ngreet Alice\n")

    assert main(["parse", str(tmp_path / "main.lb")]) == 0
    assert capsys.readouterr().out == "line=2 name='greet' comment='# note\\n' body='Alice\\n'\n"


def test_cli_parse_reports_syntax_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from linebased.main import main

    path = tmp_path / "bad.lb"
    path.write_text(" oops\n", encoding="utf-8")

    assert main(["parse", str(path)]) == 1
    assert capsys.readouterr().err == f"{path}:1: unexpected whitespace at start of line\n"
