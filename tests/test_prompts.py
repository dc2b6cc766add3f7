"""Tests for interactive option collection (backtool.prompts).

Covers:
- Explicit values never trigger questions
- Missing values are asked for, in order
- Connection URI question only follows an interactive database choice
- Prompter behaviour over rich.prompt (re-asking, selection by number/name)
- Non-interactive input raises PromptUnavailableError
"""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from backtool.prompts import Prompter, PromptUnavailableError, collect_options
from backtool.scaffolder.models import Database, Language, validate_project_name

pytestmark = pytest.mark.unit


class _TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture
def tty_prompter() -> Prompter:
    return Prompter(stream=_TTY())


# ---------------------------------------------------------------------------
# collect_options
# ---------------------------------------------------------------------------


class TestCollectOptions:
    def test_all_flags_no_questions(self, scripted_prompter):
        prompter = scripted_prompter()
        options = collect_options(
            project="api",
            database="postgres",
            language="ts",
            force=True,
            uri="postgresql://u:p@db:5432/api",
            prompter=prompter,
        )
        assert prompter.questions == []
        assert options.project_name == "api"
        assert options.database is Database.POSTGRESQL
        assert options.language is Language.TYPESCRIPT
        assert options.force_overwrite is True
        assert options.connection_uri == "postgresql://u:p@db:5432/api"

    def test_accepts_enum_values(self, scripted_prompter):
        options = collect_options(
            project="api",
            database=Database.SQLITE,
            language=Language.JAVASCRIPT,
            prompter=scripted_prompter(),
        )
        assert options.database is Database.SQLITE
        assert options.connection_uri is None

    def test_everything_prompted(self, scripted_prompter):
        prompter = scripted_prompter(text=["shop-api", ""], select=["MySQL", "JavaScript"])
        options = collect_options(prompter=prompter)
        assert options.project_name == "shop-api"
        assert options.database is Database.MYSQL
        assert options.language is Language.JAVASCRIPT
        assert options.connection_uri is None
        assert len(prompter.questions) == 4
        assert prompter.questions[0] == "Project name"
        assert "database" in prompter.questions[1]
        assert "language" in prompter.questions[2]
        assert "connection URI" in prompter.questions[3]

    def test_prompted_uri_is_kept(self, scripted_prompter):
        prompter = scripted_prompter(
            text=["mongodb://remote:27017/app"], select=["MongoDB"]
        )
        options = collect_options(project="app", language="js", prompter=prompter)
        assert options.connection_uri == "mongodb://remote:27017/app"

    def test_uri_not_asked_when_database_given(self, scripted_prompter):
        prompter = scripted_prompter(select=["TypeScript"])
        options = collect_options(project="app", database="sqlite", prompter=prompter)
        assert len(prompter.questions) == 1
        assert options.language is Language.TYPESCRIPT

    def test_unknown_database_flag(self, scripted_prompter):
        with pytest.raises(ValueError, match="Unknown database"):
            collect_options(project="app", database="oracle", language="js", prompter=scripted_prompter())

    def test_non_interactive_missing_field(self):
        prompter = Prompter(stream=io.StringIO())
        with pytest.raises(PromptUnavailableError, match="Project name"):
            collect_options(database="mysql", language="js", prompter=prompter)


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------


class TestPrompter:
    def test_interactive_detection(self):
        assert Prompter(stream=_TTY()).interactive is True
        assert Prompter(stream=io.StringIO()).interactive is False

    def test_ask_text_reasks_until_non_empty(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", side_effect=["", "   ", "my-app"]) as ask:
            assert tty_prompter.ask_text("Project name") == "my-app"
        assert ask.call_count == 3

    def test_ask_text_optional_empty(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", return_value=""):
            assert tty_prompter.ask_text("URI", required=False) == ""

    def test_ask_text_validation_reasks(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", side_effect=["a/b", " good "]) as ask:
            answer = tty_prompter.ask_text("Project name", validate=validate_project_name)
        assert answer == "good"
        assert ask.call_count == 2

    def test_ask_text_eof(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", side_effect=EOFError):
            with pytest.raises(PromptUnavailableError):
                tty_prompter.ask_text("Project name")

    def test_select_by_number(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", return_value="3"):
            assert tty_prompter.select("Pick", ["MongoDB", "MySQL", "PostgreSQL"]) == "PostgreSQL"

    def test_select_by_name_case_insensitive(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", return_value="sqlite"):
            assert tty_prompter.select("Pick", ["MongoDB", "SQLite"]) == "SQLite"

    def test_select_passes_numbers_and_names_to_rich(self, tty_prompter):
        with patch("backtool.prompts.Prompt.ask", return_value="1") as ask:
            assert tty_prompter.select("Pick", ["MongoDB", "SQLite"]) == "MongoDB"
        kwargs = ask.call_args.kwargs
        assert kwargs["choices"] == ["1", "2", "MongoDB", "SQLite"]
        assert kwargs["case_sensitive"] is False
        assert kwargs["show_choices"] is False

    def test_select_reasks_invalid_answer(self):
        out = io.StringIO()
        prompter = Prompter(console=Console(file=out), stream=_TTY("9\nsqlite\n"))
        assert prompter.select("Pick", ["MongoDB", "SQLite"]) == "SQLite"
        assert "Please select one of the available options" in out.getvalue()

    def test_confirm_defaults_to_no(self, tty_prompter):
        with patch("backtool.prompts.Confirm.ask", return_value=False) as ask:
            assert tty_prompter.confirm("Overwrite?") is False
        assert ask.call_args.kwargs["default"] is False

    def test_non_interactive_confirm(self):
        with pytest.raises(PromptUnavailableError):
            Prompter(stream=io.StringIO()).confirm("Overwrite?")
