"""Source code and configuration file contributors.

Each contributor renders one template into the project skeleton: the main
application class, its smoke test, the servlet initializer of war projects
and ``application.properties``.  Templates live under
``templates/<language>/`` and are named after the class they produce.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from ..description import ProjectDescription
from .contributors import GenerationContext


def source_context(description: ProjectDescription) -> dict[str, Any]:
    """Template context shared by the source code templates."""
    return {
        "package_name": description.package_name,
        "application_name": description.application_name,
        "name": description.name,
        "description": description.description,
        "language_version": description.language_version,
    }


def source_file(description: ProjectDescription, source_set: str, class_name: str) -> Path:
    """Relative path of *class_name* in *source_set* (``main`` or ``test``)."""
    return (
        Path("src")
        / source_set
        / description.language
        / description.package_path
        / f"{class_name}.{description.source_extension}"
    )


class _SourceCodeContributor:
    order = 0
    source_set = "main"
    template = "Application"

    def class_name(self, description: ProjectDescription) -> str:
        return description.application_name

    async def contribute(self, context: GenerationContext) -> None:
        description = context.description
        name = f"{description.language}/{self.template}.{description.source_extension}"
        target = context.project_root / source_file(
            description, self.source_set, self.class_name(description)
        )
        await context.renderer.render_to_file(name, target, source_context(description))


class MainSourceCodeContributor(_SourceCodeContributor):
    """Writes the application entry point."""


class TestSourceCodeContributor(_SourceCodeContributor):
    """Writes the context-loads smoke test."""

    source_set = "test"
    template = "ApplicationTests"

    def class_name(self, description: ProjectDescription) -> str:
        return f"{description.application_name}Tests"


class ServletInitializerContributor(_SourceCodeContributor):
    """Writes the servlet initializer needed to deploy a war."""

    template = "ServletInitializer"

    def class_name(self, description: ProjectDescription) -> str:
        return "ServletInitializer"

    async def contribute(self, context: GenerationContext) -> None:
        if context.description.packaging != "war":
            return
        await super().contribute(context)


class ApplicationPropertiesContributor:
    """Writes ``src/main/resources/application.properties``."""

    order = 0
    path = Path("src/main/resources/application.properties")

    def __init__(self, properties: Mapping[str, str] | None = None) -> None:
        self.properties = dict(properties or {})

    async def contribute(self, context: GenerationContext) -> None:
        await context.renderer.render_to_file(
            "application.properties",
            context.project_root / self.path,
            {"name": context.description.name, "properties": list(self.properties.items())},
        )
