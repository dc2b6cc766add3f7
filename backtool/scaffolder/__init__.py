"""backtool scaffolder -- generates an Express + JWT backend project.

Quick usage::

    from backtool.scaffolder import Database, GenerationOptions, Language, ProjectGenerator

    options = GenerationOptions(
        project_name="my-api",
        database=Database.POSTGRESQL,
        language=Language.TYPESCRIPT,
    )
    result = await ProjectGenerator(options).generate()
"""

from backtool.scaffolder.generator import GenerationResult, ProjectGenerator
from backtool.scaffolder.models import (
    ConflictPolicy,
    Database,
    FileTask,
    GenerationOptions,
    Language,
    ScaffoldError,
)
from backtool.scaffolder.templates import TemplateRenderer

__all__ = [
    "ConflictPolicy",
    "Database",
    "FileTask",
    "GenerationOptions",
    "GenerationResult",
    "Language",
    "ProjectGenerator",
    "ScaffoldError",
    "TemplateRenderer",
]
