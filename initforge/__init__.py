"""initforge -- project scaffolding for JVM platforms.

Builds a project skeleton and its Maven or Gradle build descriptor from a
``ProjectDescription``.
"""

from initforge.config import GeneratorConfig
from initforge.description import ProjectDescription
from initforge.errors import GenerationError
from initforge.scaffolder import ProjectGenerator, directory_resolver, temporary_directory_resolver

__version__ = "0.1.0"

__all__ = [
    "GenerationError",
    "GeneratorConfig",
    "ProjectDescription",
    "ProjectGenerator",
    "directory_resolver",
    "temporary_directory_resolver",
]
