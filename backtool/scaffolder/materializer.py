"""File materialization: template selection, destination paths and conflicts.

For every logical output file the materializer decides which template to
render, where the result goes (nested under ``src/`` for TypeScript, with the
language's extension) and whether an existing destination is overwritten,
kept, or confirmed with the user first.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from backtool.utils import display_path, ensure_dir, print_warning

from .models import ConflictPolicy, FileTask, GenerationOptions, Language, ScaffoldError
from .templates import TemplateNotFoundError, TemplateRenderer

ConfirmFn = Callable[[str], bool]


class OutputWriteError(ScaffoldError):
    """Raised when a generated file or directory cannot be created."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


@dataclass(frozen=True)
class OutputFile:
    """Static description of one logical output file."""

    name: str
    template: str
    dest: str
    in_source_root: bool = True
    required: bool = True
    typescript_only: bool = False


# ``{ext}`` and ``{db}`` are filled from the resolved options.
OUTPUT_FILES: tuple[OutputFile, ...] = (
    OutputFile("server", "server.j2", "server.{ext}"),
    OutputFile("user-model", "models/user.j2", "models/user.{db}.{ext}"),
    OutputFile("auth-controller", "controllers/authController.j2", "controllers/authController.{ext}"),
    OutputFile("routes/auth", "routes/auth.j2", "routes/auth.{ext}"),
    OutputFile("middleware/auth", "middleware/auth.j2", "middleware/auth.{ext}"),
    OutputFile(".env", "env.j2", ".env", in_source_root=False, required=False),
    OutputFile(".env.example", "env.example.j2", ".env.example", in_source_root=False, required=False),
    OutputFile(".gitignore", "gitignore.j2", ".gitignore", in_source_root=False, required=False),
    OutputFile("tsconfig.json", "tsconfig.json.j2", "tsconfig.json", in_source_root=False, typescript_only=True),
    OutputFile(
        "types/express.d.ts",
        "types/express.d.ts.j2",
        "types/express.d.ts",
        in_source_root=False,
        typescript_only=True,
    ),
)

SOURCE_DIRS: tuple[str, ...] = ("models", "config", "controllers", "routes", "middleware")
TYPESCRIPT_DIRS: tuple[str, ...] = ("src", "dist", "types")


@dataclass
class MaterializeResult:
    """Paths written and kept during one materialization pass."""

    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def destination_for(output: OutputFile, options: GenerationOptions, target_dir: Path) -> Path:
    """Compute the destination path of *output* for the resolved options."""
    rel = output.dest.format(ext=options.lang_profile.extension, db=options.database.value)
    base = options.source_root(target_dir) if output.in_source_root else target_dir
    return base / rel


def plan_tasks(
    options: GenerationOptions,
    target_dir: Path,
    policy: ConflictPolicy | None = None,
) -> list[FileTask]:
    """Build one ``FileTask`` per output file that applies to *options*."""
    if policy is None:
        policy = ConflictPolicy.for_run(options.force_overwrite)
    tasks: list[FileTask] = []
    for output in OUTPUT_FILES:
        if output.typescript_only and options.language is not Language.TYPESCRIPT:
            continue
        tasks.append(
            FileTask(
                name=output.name,
                source_path=output.template,
                dest_path=destination_for(output, options, target_dir),
                conflict_policy=policy,
                required=output.required,
            )
        )
    return tasks


def verify_templates(tasks: list[FileTask], renderer: TemplateRenderer) -> list[FileTask]:
    """Check every task's template before anything is written.

    Missing required templates abort the run; missing optional ones are
    reported and their tasks dropped.

    Raises:
        TemplateNotFoundError: If any required template is absent.
    """
    missing_required = [t.source_path for t in tasks if t.required and not renderer.has_template(t.source_path)]
    if missing_required:
        raise TemplateNotFoundError(missing_required, renderer.template_dir)

    available: list[FileTask] = []
    for task in tasks:
        if renderer.has_template(task.source_path):
            available.append(task)
        else:
            print_warning(f"Template '{task.source_path}' not found -- skipping {task.name}.")
    return available


def create_directories(target_dir: Path, language: Language) -> list[Path]:
    """Create the project's source directories.  Safe to call repeatedly.

    Raises:
        OutputWriteError: If a directory cannot be created.
    """
    typescript = language is Language.TYPESCRIPT
    source_root = target_dir / "src" if typescript else target_dir
    dirs = [source_root / name for name in SOURCE_DIRS]
    if typescript:
        dirs.extend(target_dir / name for name in TYPESCRIPT_DIRS)
    for directory in dirs:
        try:
            ensure_dir(directory)
        except OSError as exc:
            raise OutputWriteError(directory, exc.strerror or str(exc)) from exc
    return dirs


# ---------------------------------------------------------------------------
# Conflict handling
# ---------------------------------------------------------------------------


class ConflictResolver:
    """Decides whether a destination may be written.

    ``confirm`` is only consulted for ``PROMPT`` when the file already
    exists; the question defaults to "do not overwrite".
    """

    def __init__(self, confirm: ConfirmFn | None = None, root: Path | None = None) -> None:
        self.confirm = confirm
        self.root = root

    def should_write(self, path: Path, policy: ConflictPolicy) -> bool:
        if not path.exists():
            return True
        if policy is ConflictPolicy.FORCE:
            return True
        if policy is ConflictPolicy.SKIP or self.confirm is None:
            return False
        shown = display_path(path, self.root) if self.root else str(path)
        return self.confirm(f"{shown} already exists. Overwrite?")


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


class FileMaterializer:
    """Renders the planned output files into the target directory."""

    def __init__(self, renderer: TemplateRenderer, resolver: ConflictResolver) -> None:
        self.renderer = renderer
        self.resolver = resolver

    async def materialize(
        self,
        tasks: list[FileTask],
        context: dict[str, Any],
    ) -> MaterializeResult:
        """Render every task whose destination the resolver allows.

        Raises:
            OutputWriteError: If a destination cannot be written.
        """
        result = MaterializeResult()
        for task in tasks:
            if not self.resolver.should_write(task.dest_path, task.conflict_policy):
                result.skipped.append(task.dest_path)
                continue
            try:
                await self.renderer.render_to_file(task.source_path, task.dest_path, context)
            except OSError as exc:
                raise OutputWriteError(task.dest_path, exc.strerror or str(exc)) from exc
            result.written.append(task.dest_path)
        return result
