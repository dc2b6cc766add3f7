"""Shared pytest fixtures for the backtool test suite.

Provides reusable fixtures for:
- Generation options for every database/language combination
- A configuration that writes into ``tmp_path`` and never shells out
- A scripted prompter that replays canned answers
- Mock subprocess helpers
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from backtool.config import Config
from backtool.scaffolder.models import Database, GenerationOptions, Language


# ---------------------------------------------------------------------------
# Options & configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def make_options() -> Callable[..., GenerationOptions]:
    """Factory for ``GenerationOptions`` with sensible test defaults."""

    def _make(**overrides: Any) -> GenerationOptions:
        values: dict[str, Any] = {
            "project_name": "test-api",
            "database": Database.MONGODB,
            "language": Language.JAVASCRIPT,
        }
        values.update(overrides)
        return GenerationOptions(**values)

    return _make


@pytest.fixture
def js_options(make_options) -> GenerationOptions:
    return make_options()


@pytest.fixture
def ts_options(make_options) -> GenerationOptions:
    return make_options(database=Database.POSTGRESQL, language=Language.TYPESCRIPT)


@pytest.fixture
def offline_config(tmp_path: Path) -> Config:
    """Config writing under ``tmp_path`` with install and git disabled."""
    return Config(output_dir=tmp_path, skip_install=True, skip_git=True)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every BACKTOOL_* variable from the environment."""
    for name in list(os.environ):
        if name.startswith("BACKTOOL_"):
            monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Prompting
# ---------------------------------------------------------------------------


class ScriptedPrompter:
    """Prompter double that replays answers and records every question."""

    def __init__(
        self,
        text: list[str] | None = None,
        select: list[str] | None = None,
        confirm: list[bool] | None = None,
        interactive: bool = True,
    ) -> None:
        self._text = list(text or [])
        self._select = list(select or [])
        self._confirm = list(confirm or [])
        self.interactive = interactive
        self.questions: list[str] = []

    def ask_text(self, message: str, *, required: bool = True, validate=None) -> str:
        self.questions.append(message)
        answer = self._text.pop(0)
        return validate(answer) if validate and answer else answer

    def select(self, message: str, choices: list[str]) -> str:
        self.questions.append(message)
        answer = self._select.pop(0)
        assert answer in choices, f"{answer!r} not offered in {choices}"
        return answer

    def confirm(self, message: str, default: bool = False) -> bool:
        self.questions.append(message)
        return self._confirm.pop(0)


@pytest.fixture
def scripted_prompter() -> type[ScriptedPrompter]:
    return ScriptedPrompter


# ---------------------------------------------------------------------------
# Subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_run_command():
    """Factory patching ``run_command`` in a module with a canned result."""

    def _patch(target: str, result: tuple[int, str, str] = (0, "", ""), **kwargs: Any):
        mock = AsyncMock(return_value=result, **kwargs)
        return patch(target, mock)

    return _patch
