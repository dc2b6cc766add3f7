"""Main scaffolding orchestrator.

Takes resolved ``GenerationOptions`` and produces a ready-to-run Express
backend: source files rendered from the template tree, ``package.json`` and
the database config, installed dependencies and a git repository.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from backtool.config import Config
from backtool.utils import console, display_path, print_step

from .git_init import init_repository
from .installer import DependencyInstaller
from .manifest import ManifestWriter, dependencies, dev_dependencies, verify_manifest_templates
from .materializer import (
    ConfirmFn,
    ConflictResolver,
    FileMaterializer,
    OutputWriteError,
    create_directories,
    plan_tasks,
    verify_templates,
)
from .models import ConflictPolicy, GenerationOptions
from .templates import TemplateRenderer, build_context, ensure_template_dir


@dataclass
class GenerationResult:
    """Outcome of one scaffolding run."""

    project_root: Path
    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    dependencies_installed: bool = False
    git_initialized: bool = False


class ProjectGenerator:
    """Main scaffolding orchestrator.

    Steps run strictly in order and share nothing but the options and the
    target directory:

    1. check the template tree (before touching the file system)
    2. create the project and source directories
    3. render the source files
    4. write ``package.json`` and the database config
    5. install dependencies
    6. initialise git

    ``confirm`` answers overwrite questions.  Without it, existing files are
    kept unless ``force_overwrite`` is set.
    """

    def __init__(
        self,
        options: GenerationOptions,
        config: Config | None = None,
        confirm: ConfirmFn | None = None,
    ) -> None:
        self.options = options
        self.config = config or Config()
        self.policy = ConflictPolicy.for_run(options.force_overwrite, interactive=confirm is not None)
        self.renderer = TemplateRenderer(self.config.resolved_template_dir)
        self.installer = DependencyInstaller(self.config.package_manager, timeout=self.config.install_timeout)
        self.confirm = confirm

    @property
    def project_root(self) -> Path:
        return self.config.output_dir / self.options.project_name

    # -- Public API --------------------------------------------------------

    async def generate(self) -> GenerationResult:
        """Generate the project and return what was done.

        Raises:
            TemplateDirectoryError: If the template tree is missing.
            TemplateNotFoundError: If a required template is missing.
            OutputWriteError: If a project file or directory can't be created.
            ManifestWriteError: If ``package.json`` or the config can't be written.
            InstallError: If the package manager fails.
        """
        ensure_template_dir(self.renderer.template_dir)

        root = self.project_root
        resolver = ConflictResolver(self.confirm, root=root)

        tasks = plan_tasks(self.options, root, self.policy)
        tasks = verify_templates(tasks, self.renderer)
        verify_manifest_templates(self.renderer)

        print_step(f"Creating project in [bold]{root}[/bold]")
        try:
            await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(root, exc.strerror or str(exc)) from exc
        await asyncio.to_thread(create_directories, root, self.options.language)

        context = build_context(self.options)
        result = GenerationResult(project_root=root)

        print_step("Writing source files")
        files = await FileMaterializer(self.renderer, resolver).materialize(tasks, context)
        result.written.extend(files.written)
        result.skipped.extend(files.skipped)

        print_step("Writing package.json and database config")
        manifests = await ManifestWriter(self.renderer, resolver).write(self.options, root, self.policy)
        result.written.extend(manifests.written)
        result.skipped.extend(manifests.skipped)

        self._report_files(result)

        if self.config.skip_install:
            console.print("  [dim]Skipping dependency installation.[/dim]")
        else:
            print_step("Installing dependencies")
            await self.installer.install(
                root, dependencies(self.options), dev_dependencies(self.options)
            )
            result.dependencies_installed = True

        if self.config.skip_git:
            console.print("  [dim]Skipping git init.[/dim]")
        else:
            print_step("Initialising git repository")
            result.git_initialized = await init_repository(root, timeout=self.config.git_timeout)

        return result

    # -- Reporting ---------------------------------------------------------

    def _report_files(self, result: GenerationResult) -> None:
        root = result.project_root
        for path in result.written:
            console.print(f"  [green]+[/green] {display_path(path, root)}")
        for path in result.skipped:
            console.print(f"  [yellow]=[/yellow] {display_path(path, root)} [dim](kept existing)[/dim]")
