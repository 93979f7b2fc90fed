"""
Tests for keystroke reading and the external editor.

Run with:
    pytest tests/test_input.py -v
"""

import io
import os
import subprocess

import pytest

from gitdraft.output import Style
from gitdraft.ui.editor import edit_message, get_editor
from gitdraft.ui.keys import key_name, prompt_yes_no, read_key
from gitdraft.ui.state import BACKSPACE, CTRL_C, ENTER, ESC

PLAIN = Style(color=False, unicode=True)


class TestKeys:

    @pytest.mark.parametrize("char, name", [
        ('\r', ENTER), ('\n', ENTER), ('\x1b', ESC), ('\x03', CTRL_C),
        ('\x04', CTRL_C), ('\x7f', BACKSPACE), ('\x08', BACKSPACE), ('y', 'y'),
    ])
    def test_key_name(self, char, name):
        assert key_name(char) == name

    @pytest.mark.parametrize("text, key", [
        ("yes\n", "y"),
        ("  e \n", "e"),
        ("\n", ENTER),
        ("", CTRL_C),
    ])
    def test_read_key_from_lines(self, text, key):
        assert read_key(io.StringIO(text)) == key

    @pytest.mark.parametrize("text, answer", [
        ("y\n", True),
        ("Y\n", True),
        ("n\n", False),
        ("maybe\nx\nn\n", False),
        ("x\n\ny\n", True),
        ("", False),
    ])
    def test_prompt_yes_no(self, text, answer):
        out = io.StringIO()
        assert prompt_yes_no("Push now? (y)es / (n)o", PLAIN, out=out, stream=io.StringIO(text)) is answer
        assert out.getvalue().startswith("Push now? (y)es / (n)o ")


class TestEditor:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for var in ("GIT_EDITOR", "VISUAL", "EDITOR"):
            monkeypatch.delenv(var, raising=False)

    def test_editor_precedence(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "nano")
        monkeypatch.setenv("VISUAL", "code --wait")
        assert get_editor() == "code --wait"
        monkeypatch.setenv("GIT_EDITOR", "vim")
        assert get_editor() == "vim"

    def test_edit_returns_new_text(self, monkeypatch):
        monkeypatch.setenv("GIT_EDITOR", "code --wait")
        seen = []

        def fake_run(argv, check=False):
            seen.append(argv)
            with open(argv[-1], encoding="utf-8") as f:
                assert f.read() == "feat: x"
            with open(argv[-1], "w", encoding="utf-8") as f:
                f.write("fix: y\n\n")
            return subprocess.CompletedProcess(argv, 0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert edit_message("feat: x") == "fix: y"
        assert seen[0][:2] == ["code", "--wait"]
        assert not os.path.exists(seen[0][-1])

    def test_emptied_file_is_a_failed_edit(self, monkeypatch):
        def fake_run(argv, check=False):
            open(argv[-1], "w").close()
            return subprocess.CompletedProcess(argv, 0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert edit_message("feat: x") is None

    def test_editor_exit_status(self, monkeypatch):
        def fake_run(argv, check=False):
            raise subprocess.CalledProcessError(1, argv)

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert edit_message("feat: x") is None

    def test_missing_editor(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "no-such-editor")

        def fake_run(argv, check=False):
            raise FileNotFoundError(argv[0])

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert edit_message("feat: x") is None
