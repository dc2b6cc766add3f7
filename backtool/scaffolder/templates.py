"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``backtool/scaffolder/templates/`` directory and renders them with the
context built from ``GenerationOptions``.  One template exists per logical
output file; database and language differences are expressed through the
render context rather than through separate template copies.
"""

from __future__ import annotations

import asyncio
import secrets
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from backtool.config import DEFAULT_TEMPLATE_DIR

from .models import GenerationOptions, ScaffoldError

DEFAULT_PORT = 8000


class TemplateDirectoryError(ScaffoldError):
    """Raised when the template root directory does not exist."""

    def __init__(self, template_dir: Path) -> None:
        self.template_dir = template_dir
        super().__init__(f"Template directory not found: {template_dir}")


class TemplateNotFoundError(ScaffoldError):
    """Raised when a required template is missing from the template tree."""

    def __init__(self, missing: list[str], template_dir: Path) -> None:
        self.missing = missing
        self.template_dir = template_dir
        names = ", ".join(missing)
        super().__init__(f"Missing required template(s) in {template_dir}: {names}")


def build_context(options: GenerationOptions, jwt_secret: str | None = None) -> dict[str, Any]:
    """Build the Jinja2 template context shared by every generated file."""
    return {
        "project_name": options.project_name,
        "database": options.database.value,
        "db": options.db_profile,
        "ts": options.is_typescript,
        "ext": options.lang_profile.extension,
        "imp": options.lang_profile.import_suffix,
        "connection_uri": options.effective_connection_uri,
        "default_connection_uri": options.db_profile.default_connection_uri(options.project_name),
        "jwt_secret": jwt_secret or secrets.token_hex(32),
        "port": DEFAULT_PORT,
    }


def ensure_template_dir(template_dir: str | Path) -> Path:
    """Return *template_dir* as a ``Path`` or raise ``TemplateDirectoryError``."""
    path = Path(template_dir)
    if not path.is_dir():
        raise TemplateDirectoryError(path)
    return path


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Undefined variables are errors: a template that references a context key
    the generator did not supply fails loudly instead of emitting an empty
    string into generated source code.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["params"] = _params_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"models/user.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(write_file, out, content)
        return out

    # -- Utility -----------------------------------------------------------

    def has_template(self, template_path: str) -> bool:
        """Return ``True`` if *template_path* exists under the template root."""
        return (self.template_dir / template_path).is_file()


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _params_filter(db: Any, count: int) -> str:
    """Render *count* bound-parameter markers for a ``DatabaseProfile``."""
    return ", ".join(db.params(count))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
