"""Shared pytest fixtures for the initforge test suite.

Provides reusable fixtures for:
- Project descriptions (Maven / Gradle, Java / Kotlin)
- The bundled catalog and its metadata provider
- Template renderers over the bundled or a temporary template root
- Generation contexts wired to a temporary project directory
"""

from __future__ import annotations

from pathlib import Path

import pytest

from initforge.buildsystem.gradle import GradleBuild
from initforge.buildsystem.maven import MavenBuild
from initforge.buildsystem.registry import default_registry
from initforge.description import ProjectDescription
from initforge.metadata import CatalogMetadataProvider
from initforge.scaffolder.contributors import GenerationContext
from initforge.scaffolder.templates import TemplateRenderer

PLATFORM_VERSION = "3.4.1"


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Target directory of one generation (auto-cleanup)."""
    root = tmp_path / "demo"
    root.mkdir()
    yield root


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """An empty template search root for renderer tests."""
    root = tmp_path / "templates"
    root.mkdir()
    yield root


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------


@pytest.fixture
def maven_description() -> ProjectDescription:
    return ProjectDescription(
        group_id="com.example",
        artifact_id="demo",
        name="demo",
        description="Demo project",
        build_system="maven",
        platform_version=PLATFORM_VERSION,
        dependencies=("web",),
    )


@pytest.fixture
def gradle_description() -> ProjectDescription:
    return ProjectDescription(
        group_id="com.example",
        artifact_id="demo",
        build_system="gradle",
        platform_version=PLATFORM_VERSION,
        dependencies=("web",),
    )


@pytest.fixture
def kotlin_description() -> ProjectDescription:
    return ProjectDescription(
        group_id="com.example",
        artifact_id="demo",
        language="kotlin",
        build_system="gradle-kotlin",
        platform_version=PLATFORM_VERSION,
        dependencies=("web",),
    )


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def provider() -> CatalogMetadataProvider:
    """Metadata provider over the bundled catalog."""
    return CatalogMetadataProvider.from_path()


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def renderer() -> TemplateRenderer:
    """Renderer over the bundled templates."""
    return TemplateRenderer()


@pytest.fixture
def maven_build() -> MavenBuild:
    return MavenBuild()


@pytest.fixture
def gradle_build() -> GradleBuild:
    return GradleBuild()


@pytest.fixture
def maven_context(project_root, maven_description, maven_build, renderer, provider) -> GenerationContext:
    """Generation context of a Maven web project rooted in ``project_root``."""
    return GenerationContext(
        project_root=project_root,
        description=maven_description,
        build=maven_build,
        renderer=renderer,
        metadata=provider,
    )
