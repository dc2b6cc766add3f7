"""Best-effort ``git init`` for the generated project.

A missing git binary or a failing ``git init`` only produces a warning; the
scaffolding run always continues.
"""

from __future__ import annotations

from pathlib import Path

from backtool.utils import console, print_warning, run_command


async def init_repository(target_dir: Path, timeout: int = 60) -> bool:
    """Initialise a git repository in *target_dir*.

    Returns:
        ``True`` if a repository exists afterwards because this call created
        it, ``False`` if it was already present or initialisation failed.
    """
    if (target_dir / ".git").exists():
        console.print("  [dim]Git repository already present -- skipping git init.[/dim]")
        return False

    try:
        returncode, _stdout, stderr = await run_command(["git", "init"], cwd=target_dir, timeout=timeout)
    except FileNotFoundError:
        print_warning("git was not found on PATH -- skipping repository initialisation.")
        return False

    if returncode != 0:
        detail = f": {stderr}" if stderr else ""
        print_warning(f"git init failed (exit {returncode}){detail}")
        return False

    console.print("  [green]+[/green] Initialised git repository")
    return True
