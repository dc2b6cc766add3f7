"""Dependency installation through the configured Node package manager.

Runtime and development packages are installed in two separate invocations
so the package manager records them in the right ``package.json`` section.
A failed install is fatal and never retried; the manual command lines are
printed so the user can finish the job by hand.
"""

from __future__ import annotations

from pathlib import Path

from backtool.utils import console, create_progress, format_command, print_error, run_command

from .models import ScaffoldError

# package manager -> (runtime install prefix, dev install prefix)
INSTALL_COMMANDS: dict[str, tuple[list[str], list[str]]] = {
    "npm": (["npm", "install", "--save"], ["npm", "install", "--save-dev"]),
    "yarn": (["yarn", "add"], ["yarn", "add", "--dev"]),
    "pnpm": (["pnpm", "add"], ["pnpm", "add", "--save-dev"]),
}


class InstallError(ScaffoldError):
    """Raised when the package manager fails to install dependencies."""

    def __init__(self, message: str, commands: list[list[str]], stderr: str = "") -> None:
        self.commands = commands
        self.stderr = stderr
        super().__init__(message)

    @property
    def manual_commands(self) -> list[str]:
        return [format_command(cmd) for cmd in self.commands]


class DependencyInstaller:
    """Runs the package manager inside the generated project."""

    def __init__(self, package_manager: str = "npm", timeout: int = 600) -> None:
        if package_manager not in INSTALL_COMMANDS:
            raise ValueError(f"Unsupported package manager: {package_manager}")
        self.package_manager = package_manager
        self.timeout = timeout

    def steps(self, dependencies: list[str], dev_dependencies: list[str]) -> list[tuple[str, list[str]]]:
        """Return (label, command) pairs, skipping empty package lists."""
        runtime_prefix, dev_prefix = INSTALL_COMMANDS[self.package_manager]
        steps: list[tuple[str, list[str]]] = []
        if dependencies:
            steps.append(("dependencies", [*runtime_prefix, *dependencies]))
        if dev_dependencies:
            steps.append(("dev dependencies", [*dev_prefix, *dev_dependencies]))
        return steps

    async def install(
        self,
        target_dir: Path,
        dependencies: list[str],
        dev_dependencies: list[str],
    ) -> None:
        """Install both package lists in *target_dir*.

        Raises:
            InstallError: On a non-zero exit, a timeout, or a missing
                package-manager executable.
        """
        steps = self.steps(dependencies, dev_dependencies)
        cmds = [cmd for _label, cmd in steps]
        for label, cmd in steps:
            with create_progress() as progress:
                progress.add_task(f"Installing {label} with {self.package_manager}...", total=None)
                try:
                    returncode, _stdout, stderr = await run_command(cmd, cwd=target_dir, timeout=self.timeout)
                except FileNotFoundError:
                    self._fail(f"'{self.package_manager}' was not found on PATH.", cmds)
            if returncode != 0:
                self._fail(f"Installing {label} failed (exit {returncode}).", cmds, stderr)
            console.print(f"  [green]+[/green] Installed {label}")

    def _fail(self, message: str, cmds: list[list[str]], stderr: str = "") -> None:
        error = InstallError(message, cmds, stderr)
        print_error(message)
        if stderr:
            console.print(f"[dim]{stderr}[/dim]")
        console.print("Run the following manually inside the project directory:")
        for line in error.manual_commands:
            console.print(f"  [bold]{line}[/bold]")
        raise error
