"""Manifest generation: ``package.json`` and the database config source.

Everything here except ``ManifestWriter`` is a pure function of
``GenerationOptions``.  ``package.json`` declares every dependency with the
``latest`` range so a plain ``npm install`` works even when installation was
skipped; the installer run then records the resolved versions.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from .materializer import ConflictResolver, MaterializeResult, OutputWriteError
from .models import ConflictPolicy, GenerationOptions, Language
from .templates import TemplateNotFoundError, TemplateRenderer, build_context, write_file

CORE_DEPENDENCIES: tuple[str, ...] = ("express", "dotenv", "cors", "jsonwebtoken")
PASSWORD_HASHING: tuple[str, ...] = ("bcryptjs",)
DEV_DEPENDENCIES: tuple[str, ...] = ("nodemon",)
TYPESCRIPT_DEV_DEPENDENCIES: tuple[str, ...] = (
    "typescript",
    "ts-node",
    "@types/node",
    "@types/express",
    "@types/cors",
    "@types/jsonwebtoken",
    "@types/bcryptjs",
)

DATABASE_CONFIG_TEMPLATE = "config/database.j2"
DEFAULT_VERSION_RANGE = "latest"


class ManifestWriteError(OutputWriteError):
    """Raised when a generated manifest cannot be written."""


# ---------------------------------------------------------------------------
# Dependency sets
# ---------------------------------------------------------------------------


def dependencies(options: GenerationOptions) -> list[str]:
    """Runtime packages: core web stack, database driver, password hashing."""
    return [*CORE_DEPENDENCIES, *options.db_profile.driver_packages, *PASSWORD_HASHING]


def dev_dependencies(options: GenerationOptions) -> list[str]:
    """Development-only packages (file watcher, plus the TypeScript toolchain)."""
    deps = list(DEV_DEPENDENCIES)
    if options.language is Language.TYPESCRIPT:
        deps.extend(TYPESCRIPT_DEV_DEPENDENCIES)
        deps.extend(options.db_profile.type_packages)
    return deps


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------


def build_scripts(language: Language) -> dict[str, str]:
    if language is Language.TYPESCRIPT:
        return {
            "start": "ts-node src/server.ts",
            "dev": "nodemon --exec ts-node src/server.ts",
            "build": "tsc",
        }
    return {
        "start": "node server.js",
        "dev": "nodemon server.js",
    }


def build_package_json(options: GenerationOptions) -> dict[str, Any]:
    """Return the ``package.json`` document for *options*."""
    typescript = options.language is Language.TYPESCRIPT
    return {
        "name": options.project_name,
        "version": "1.0.0",
        "description": f"Express backend with JWT auth and {options.db_profile.label}",
        "main": "dist/server.js" if typescript else "server.js",
        "type": options.lang_profile.module_type,
        "scripts": build_scripts(options.language),
        "keywords": [],
        "license": "ISC",
        "dependencies": _version_map(dependencies(options)),
        "devDependencies": _version_map(dev_dependencies(options)),
    }


def _version_map(packages: list[str]) -> dict[str, str]:
    return {name: DEFAULT_VERSION_RANGE for name in sorted(packages)}


def render_package_json(options: GenerationOptions) -> str:
    return json.dumps(build_package_json(options), indent=2) + "\n"


# ---------------------------------------------------------------------------
# Database config
# ---------------------------------------------------------------------------


def database_config_path(options: GenerationOptions, target_dir: Path) -> Path:
    return options.source_root(target_dir) / "config" / f"database.{options.lang_profile.extension}"


def verify_manifest_templates(renderer: TemplateRenderer) -> None:
    """Raise ``TemplateNotFoundError`` unless the database config template exists."""
    if not renderer.has_template(DATABASE_CONFIG_TEMPLATE):
        raise TemplateNotFoundError([DATABASE_CONFIG_TEMPLATE], renderer.template_dir)


def render_database_config(options: GenerationOptions, renderer: TemplateRenderer | None = None) -> str:
    """Render the connection setup module that also exports the database tag.

    Uses the explicit connection URI when one was given, otherwise the
    database default for this project.
    """
    renderer = renderer or TemplateRenderer()
    return renderer.render(DATABASE_CONFIG_TEMPLATE, build_context(options))


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class ManifestWriter:
    """Writes ``package.json`` and the database config under the conflict policy."""

    def __init__(self, renderer: TemplateRenderer, resolver: ConflictResolver) -> None:
        self.renderer = renderer
        self.resolver = resolver

    async def write(
        self,
        options: GenerationOptions,
        target_dir: Path,
        policy: ConflictPolicy | None = None,
    ) -> MaterializeResult:
        """Write both manifests.

        Raises:
            TemplateNotFoundError: If the database config template is missing.
            ManifestWriteError: If either file cannot be written.
        """
        verify_manifest_templates(self.renderer)
        if policy is None:
            policy = ConflictPolicy.for_run(options.force_overwrite)

        artifacts = [
            (target_dir / "package.json", render_package_json(options)),
            (database_config_path(options, target_dir), render_database_config(options, self.renderer)),
        ]

        result = MaterializeResult()
        for path, content in artifacts:
            if not self.resolver.should_write(path, policy):
                result.skipped.append(path)
                continue
            try:
                await asyncio.to_thread(write_file, path, content)
            except OSError as exc:
                raise ManifestWriteError(path, exc.strerror or str(exc)) from exc
            result.written.append(path)
        return result
