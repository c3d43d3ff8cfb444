"""initforge scaffolder -- generates ready-to-build JVM projects.

This module takes a ``ProjectDescription`` as input and renders a project
directory: application sources, configuration files, ``.gitignore`` and the
build descriptor of the selected build system.

Quick usage::

    from initforge.scaffolder import ProjectGenerator, directory_resolver
    from initforge.description import ProjectDescription

    description = ProjectDescription(
        group_id="com.example",
        artifact_id="demo",
        build_system="gradle",
        platform_version="3.4.1",
        dependencies=("web", "devtools"),
    )
    generator = ProjectGenerator.from_config()
    project_path = await generator.generate(description, directory_resolver("/tmp/output"))
"""

from initforge.scaffolder.contributors import (
    HIGHEST_PRECEDENCE,
    LOWEST_PRECEDENCE,
    ContributorPipeline,
    GenerationContext,
    ProjectContributor,
)
from initforge.scaffolder.customizers import BuildCustomizer, CustomizerPipeline
from initforge.scaffolder.generator import (
    ProjectGenerator,
    directory_resolver,
    standard_contributors,
    standard_customizers,
    temporary_directory_resolver,
)
from initforge.scaffolder.templates import TemplateRenderer, shared_renderer

__all__ = [
    "BuildCustomizer",
    "ContributorPipeline",
    "CustomizerPipeline",
    "GenerationContext",
    "HIGHEST_PRECEDENCE",
    "LOWEST_PRECEDENCE",
    "ProjectContributor",
    "ProjectGenerator",
    "TemplateRenderer",
    "directory_resolver",
    "shared_renderer",
    "standard_contributors",
    "standard_customizers",
    "temporary_directory_resolver",
]
