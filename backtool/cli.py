"""backtool command-line entry point.

Usage::

    backtool
    backtool --project my-api --database postgres --language typescript
    backtool -p my-api -d sqlite -l js --force --skip-install
    python -m backtool.cli --help
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from backtool import __version__
from backtool.config import Config
from backtool.prompts import Prompter, collect_options
from backtool.scaffolder.generator import GenerationResult, ProjectGenerator
from backtool.scaffolder.installer import INSTALL_COMMANDS
from backtool.scaffolder.models import (
    Database,
    GenerationOptions,
    Language,
    ScaffoldError,
    validate_project_name,
)
from backtool.utils import (
    console,
    print_banner,
    print_error,
    print_success,
    print_summary_table,
)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _argument_type(parse: Callable[[str], Any]) -> Callable[[str], Any]:
    """Adapt a ``ValueError``-raising parser to argparse's error reporting."""

    def convert(value: str) -> Any:
        try:
            return parse(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from None

    convert.__name__ = parse.__name__
    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backtool",
        description="Scaffold an Express + JWT backend for MongoDB, MySQL, PostgreSQL or SQLite.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  backtool\n"
            "  backtool --project my-api --database postgres --language typescript\n"
            "  backtool -p my-api -d sqlite -l js --force --skip-install\n"
        ),
    )
    parser.add_argument(
        "--project", "-p",
        type=_argument_type(validate_project_name),
        help="Project name; also the name of the directory to create",
    )
    parser.add_argument(
        "--database", "-d",
        type=_argument_type(Database.parse),
        metavar="{mongo,mysql,postgres,sqlite}",
        help="Database the generated backend connects to",
    )
    parser.add_argument(
        "--language", "-l",
        type=_argument_type(Language.parse),
        metavar="{javascript,typescript}",
        help="Language of the generated sources",
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite existing files without asking",
    )
    parser.add_argument(
        "--uri", "-u",
        default=None,
        help="Database connection string (default depends on the database)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory in which the project directory is created (default: .)",
    )
    parser.add_argument(
        "--package-manager",
        choices=sorted(INSTALL_COMMANDS),
        default=None,
        help="Package manager used to install dependencies (default: npm)",
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Do not install dependencies",
    )
    parser.add_argument(
        "--skip-git",
        action="store_true",
        help="Do not run git init",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Environment configuration overridden by explicit flags."""
    config = Config.from_env()
    overrides: dict[str, Any] = {}
    if args.output is not None:
        overrides["output_dir"] = args.output
    if args.package_manager is not None:
        overrides["package_manager"] = args.package_manager
    if args.skip_install:
        overrides["skip_install"] = True
    if args.skip_git:
        overrides["skip_git"] = True
    if not overrides:
        return config
    return Config.model_validate({**config.model_dump(), **overrides})


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def print_result(options: GenerationOptions, result: GenerationResult, config: Config) -> None:
    print_summary_table(
        {
            "Project": options.project_name,
            "Location": str(result.project_root),
            "Database": options.database.label,
            "Language": options.language.label,
            "Files written": str(len(result.written)),
            "Files kept": str(len(result.skipped)),
            "Dependencies": "installed" if result.dependencies_installed else "not installed",
            "Git": "initialised" if result.git_initialized else "not initialised",
        },
        title="Project created",
    )
    pm = config.package_manager
    console.print("Next steps:")
    console.print(f"  cd {result.project_root}")
    if not result.dependencies_installed:
        console.print(f"  {pm} install")
    console.print(f"  {pm} run dev")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``backtool`` and ``python -m backtool.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(EXIT_FAILURE)

    print_banner("BackTool", f"v{__version__} -- Express + JWT backend scaffolder")

    prompter = Prompter()
    try:
        options = collect_options(
            project=args.project,
            database=args.database,
            language=args.language,
            force=args.force,
            uri=args.uri,
            prompter=prompter,
        )
        generator = ProjectGenerator(
            options,
            config,
            confirm=prompter.confirm if prompter.interactive else None,
        )
        result = asyncio.run(generator.generate())
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        sys.exit(EXIT_FAILURE)
    except KeyboardInterrupt:
        console.print()
        print_error("Aborted.")
        sys.exit(EXIT_INTERRUPTED)

    print_result(options, result, config)
    print_success(f"{options.project_name} is ready.")


if __name__ == "__main__":
    main()
