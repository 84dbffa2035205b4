"""Tests for the interactive prompts."""

import io
from pathlib import Path

import pytest

from foldercopy import prompts


def answers(*values):
    it = iter(values)

    def fake_input(prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError

    return fake_input


class TestPickSubdirs:
    NAMES = ["src", "docs", "tests"]

    def test_enter_keeps_all(self):
        assert prompts.pick_subdirs(self.NAMES, answers(""), io.StringIO()) is None

    def test_end_of_input_keeps_all(self):
        assert prompts.pick_subdirs(self.NAMES, answers(), io.StringIO()) is None

    def test_exclude_by_number(self):
        assert prompts.pick_subdirs(self.NAMES, answers("2, 3"), io.StringIO()) == frozenset({"src"})

    def test_none_selects_nothing(self):
        assert prompts.pick_subdirs(self.NAMES, answers("none"), io.StringIO()) == frozenset()

    def test_bad_answers_are_asked_again(self):
        out = io.StringIO()
        assert prompts.pick_subdirs(self.NAMES, answers("x", "9", "1"), out) == frozenset({"docs", "tests"})
        assert "Please enter numbers" in out.getvalue()
        assert "between 1 and 3" in out.getvalue()

    def test_interrupt_keeps_all(self):
        def interrupted(prompt):
            raise KeyboardInterrupt

        assert prompts.pick_subdirs(self.NAMES, interrupted, io.StringIO()) is None

    def test_lists_names(self):
        out = io.StringIO()
        prompts.pick_subdirs(self.NAMES, answers(""), out)
        assert "[x] 1. src" in out.getvalue()


class TestConfirm:
    @pytest.mark.parametrize("reply, expected", [
        ("y", True), ("YES", True), ("n", False), ("", False), ("maybe", False),
    ])
    def test_replies(self, reply, expected):
        assert prompts.confirm("Proceed?", answers(reply)) is expected

    def test_end_of_input_declines(self):
        assert prompts.confirm("Proceed?", answers()) is False


class TestChooseAction:
    @pytest.mark.parametrize("reply, expected", [
        ("", prompts.CLIPBOARD),
        ("1", prompts.CLIPBOARD),
        ("2", prompts.EXPORT),
        ("7", None),
    ])
    def test_replies(self, reply, expected):
        assert prompts.choose_action(answers(reply), io.StringIO()) == expected

    def test_end_of_input_cancels(self):
        assert prompts.choose_action(answers(), io.StringIO()) is None


class TestAskDestination:
    def test_default(self, tmp_path):
        default = tmp_path / "out.md"
        assert prompts.ask_destination(default, answers("")) == default

    def test_custom(self, tmp_path):
        assert prompts.ask_destination(tmp_path, answers("/tmp/x.md")) == Path("/tmp/x.md")

    def test_cancel(self, tmp_path):
        assert prompts.ask_destination(tmp_path, answers()) is None

    def test_uses_builtin_input_by_default(self, monkeypatch, tmp_path):
        monkeypatch.setattr("builtins.input", lambda prompt: "chosen.md")
        assert prompts.ask_destination(tmp_path / "d.md") == Path("chosen.md")
