"""backtool configuration.

Tool-level settings that are independent of the project being generated:
where to write, which package manager to drive, which template tree to read
and how long external commands may run.  Values come from environment
variables (``Config.from_env``) and are then overridden by CLI flags.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

PackageManager = Literal["npm", "yarn", "pnpm"]

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates"

_TRUTHY = {"1", "true", "yes", "on"}


class Config(BaseModel):
    """Global backtool configuration.

    Instances are created once by the CLI entry point and passed to the
    ``ProjectGenerator``.
    """

    output_dir: Path = Field(default=Path("."), description="Parent directory of the new project")
    template_dir: Path | None = Field(
        default=None, description="Template tree to render (defaults to the packaged one)"
    )
    package_manager: PackageManager = Field(default="npm")
    install_timeout: int = Field(default=600, ge=10, description="Per-install timeout in seconds")
    git_timeout: int = Field(default=60, ge=1, description="git init timeout in seconds")
    skip_install: bool = Field(default=False)
    skip_git: bool = Field(default=False)

    @property
    def resolved_template_dir(self) -> Path:
        """Template root actually used for rendering."""
        return self.template_dir if self.template_dir is not None else DEFAULT_TEMPLATE_DIR

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            BACKTOOL_OUTPUT_DIR, BACKTOOL_TEMPLATE_DIR, BACKTOOL_PACKAGE_MANAGER,
            BACKTOOL_INSTALL_TIMEOUT, BACKTOOL_GIT_TIMEOUT,
            BACKTOOL_SKIP_INSTALL, BACKTOOL_SKIP_GIT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("BACKTOOL_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["BACKTOOL_OUTPUT_DIR"])
        if os.environ.get("BACKTOOL_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["BACKTOOL_TEMPLATE_DIR"])
        if os.environ.get("BACKTOOL_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["BACKTOOL_PACKAGE_MANAGER"].strip().lower()
        if os.environ.get("BACKTOOL_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["BACKTOOL_INSTALL_TIMEOUT"])
        if os.environ.get("BACKTOOL_GIT_TIMEOUT"):
            kwargs["git_timeout"] = int(os.environ["BACKTOOL_GIT_TIMEOUT"])
        kwargs["skip_install"] = _env_flag("BACKTOOL_SKIP_INSTALL")
        kwargs["skip_git"] = _env_flag("BACKTOOL_SKIP_GIT")
        return cls(**kwargs)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY
