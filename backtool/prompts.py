"""Interactive option collection.

Resolves ``GenerationOptions`` from explicit CLI values, asking the user for
whatever is missing.  Questions are rendered with ``rich.prompt`` on the
shared console.  When stdin is not a terminal, a question that would have to
be asked raises ``PromptUnavailableError`` instead of blocking.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO

from rich.console import Console
from rich.prompt import Confirm, Prompt

from backtool.scaffolder.models import (
    Database,
    GenerationOptions,
    Language,
    ScaffoldError,
    validate_project_name,
)
from backtool.utils import console as default_console


class PromptUnavailableError(ScaffoldError):
    """Raised when a question must be asked but stdin is not interactive."""

    def __init__(self, question: str) -> None:
        self.question = question
        super().__init__(
            f"Cannot ask '{question}': input is not interactive. "
            "Pass the value as a command-line flag instead."
        )


class Prompter:
    """Thin wrapper over ``rich.prompt`` with non-interactive detection."""

    def __init__(self, console: Console | None = None, stream: TextIO | None = None) -> None:
        self.console = console or default_console
        self.stream = stream

    @property
    def interactive(self) -> bool:
        stream = self.stream if self.stream is not None else sys.stdin
        isatty = getattr(stream, "isatty", None)
        return bool(isatty is not None and isatty())

    def ask_text(
        self,
        message: str,
        *,
        required: bool = True,
        validate: Callable[[str], str] | None = None,
    ) -> str:
        """Ask for free text.  Required answers are re-asked until non-empty."""
        self._require_interactive(message)
        while True:
            try:
                answer = Prompt.ask(message, console=self.console, default="", show_default=False, stream=self.stream)
            except EOFError:
                raise PromptUnavailableError(message) from None
            answer = answer.strip()
            if not answer:
                if not required:
                    return ""
                self.console.print("[yellow]A value is required.[/yellow]")
                continue
            if validate is None:
                return answer
            try:
                return validate(answer)
            except ValueError as exc:
                self.console.print(f"[yellow]{exc}[/yellow]")

    def select(self, message: str, choices: list[str]) -> str:
        """Ask the user to pick one of *choices* by number or by name.

        ``rich`` validates the answer against both the numbers and the
        names and re-asks on anything else.
        """
        self._require_interactive(message)
        self.console.print(f"[bold]{message}[/bold]")
        for index, choice in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]) {choice}")

        numbers = [str(index) for index in range(1, len(choices) + 1)]
        try:
            answer = Prompt.ask(
                "Choice",
                console=self.console,
                choices=[*numbers, *choices],
                show_choices=False,
                case_sensitive=False,
                default="1",
                stream=self.stream,
            )
        except EOFError:
            raise PromptUnavailableError(message) from None
        if answer in numbers:
            return choices[numbers.index(answer)]
        return next(choice for choice in choices if choice.lower() == answer.lower())

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        self._require_interactive(message)
        try:
            return Confirm.ask(message, console=self.console, default=default, stream=self.stream)
        except EOFError:
            raise PromptUnavailableError(message) from None

    def _require_interactive(self, question: str) -> None:
        if not self.interactive:
            raise PromptUnavailableError(question)


def collect_options(
    project: str | None = None,
    database: str | Database | None = None,
    language: str | Language | None = None,
    force: bool = False,
    uri: str | None = None,
    prompter: Prompter | None = None,
) -> GenerationOptions:
    """Merge explicit values with answers to questions for the missing ones.

    Explicit values always win.  The connection URI is only asked for when
    the database itself was chosen interactively; an empty answer keeps the
    database's default connection string.
    """
    prompter = prompter or Prompter()

    if project is None:
        project = prompter.ask_text("Project name", validate=validate_project_name)

    database_prompted = database is None
    if database is None:
        database = prompter.select(
            "Which database do you want to use?", [d.label for d in Database]
        )
    if not isinstance(database, Database):
        database = Database.parse(database)

    if language is None:
        language = prompter.select(
            "Which language do you want to use?", [lang.label for lang in Language]
        )
    if not isinstance(language, Language):
        language = Language.parse(language)

    if uri is None and database_prompted:
        uri = prompter.ask_text(
            f"{database.label} connection URI (leave empty for the default)",
            required=False,
        ) or None

    return GenerationOptions(
        project_name=project,
        database=database,
        language=language,
        force_overwrite=force,
        connection_uri=uri,
    )
