"""
Tests for the playtpl command line.
"""

import json
import logging
from pathlib import Path

import pytest

from playtpl.cli import main

from tests.infrastructure import write


@pytest.fixture(autouse=True)
def _drop_cli_log_handler():
    # main() attaches a handler bound to the captured stderr of the test
    yield
    logger = logging.getLogger("playtpl")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def cwd(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestRender:

    def test_renders_to_stdout(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "Hello %{ write(name) }%!\n")
        code = main(["render", "page.tpl", "--var", "name=World"])
        assert code == 0
        assert capsys.readouterr().out == "Hello World!\n"

    def test_suffix_may_be_omitted(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "ok")
        assert main(["render", "page"]) == 0
        assert capsys.readouterr().out == "ok"

    def test_scope_file_and_var_override(self, cwd: Path, capsys):
        write(cwd / "scope.yaml", "name: FromFile\nitems: [1, 2]\n")
        write(cwd / "page.tpl", "%{ write(name, sum(items)) }%")
        assert main(["render", "page.tpl", "--scope", "scope.yaml", "--var", "name=X"]) == 0
        assert capsys.readouterr().out == "X3"

    def test_script_fault_exit_code(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "a%{ 1 / 0 }%b")
        assert main(["render", "page.tpl"]) == 2
        captured = capsys.readouterr()
        assert captured.out == "ab"
        assert "ZeroDivisionError" in captured.err

    def test_config_from_cwd(self, cwd: Path, capsys):
        write(cwd / "playtpl.yaml", "swallow_comment_newline: false\n")
        write(cwd / "page.tpl", "*{c}*\nx")
        assert main(["render", "page.tpl"]) == 0
        assert capsys.readouterr().out == "\nx"

    def test_strict_abort_flag(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "a%{ exit() }%b%{ write(1 / 0) }%")
        assert main(["render", "page.tpl", "--strict-abort"]) == 0
        assert capsys.readouterr().out == "a"

    def test_missing_template(self, cwd: Path, capsys):
        assert main(["render", "nope.tpl"]) == 1
        assert "Template not found" in capsys.readouterr().err

    def test_missing_explicit_config(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "x")
        assert main(["render", "page.tpl", "--config", "other.yaml"]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_bad_var(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "x")
        assert main(["render", "page.tpl", "--var", "novalue"]) == 1
        assert "NAME=VALUE" in capsys.readouterr().err

    def test_unimplemented_directive_is_reported(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "line\n${x}")
        assert main(["render", "page.tpl"]) == 1
        assert "page.tpl:2: EXPR directive is not implemented" in capsys.readouterr().err


class TestTokens:

    def test_dumps_json_lines(self, cwd: Path, capsys):
        write(cwd / "page.tpl", "a%{b}%c")
        assert main(["tokens", "page.tpl"]) == 0
        lines = [json.loads(s) for s in capsys.readouterr().out.splitlines()]
        assert [(t["token"], t["text"]) for t in lines] == [
            ("PLAIN", "a"),
            ("SCRIPT", "b"),
            ("PLAIN", "c"),
        ]
        assert lines[1]["line"] == 1


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.startswith("playtpl ")
