"""Build model and build system backends."""

from initforge.buildsystem.base import BuildSystemAdapter
from initforge.buildsystem.gradle import GradleAdapter, GradleBuild, GradleDependency, GradleKotlinAdapter
from initforge.buildsystem.maven import MavenAdapter, MavenBuild, MavenDependency, MavenExecution, MavenPlugin
from initforge.buildsystem.model import (
    MAVEN_CENTRAL,
    MAVEN_CENTRAL_ID,
    BillOfMaterials,
    Build,
    Dependency,
    DependencyScope,
    Exclusion,
    Plugin,
    Repository,
    VersionReference,
)
from initforge.buildsystem.registry import BuildSystemRegistry, default_registry

__all__ = [
    "BillOfMaterials",
    "Build",
    "BuildSystemAdapter",
    "BuildSystemRegistry",
    "Dependency",
    "DependencyScope",
    "Exclusion",
    "GradleAdapter",
    "GradleBuild",
    "GradleDependency",
    "GradleKotlinAdapter",
    "MAVEN_CENTRAL",
    "MAVEN_CENTRAL_ID",
    "MavenAdapter",
    "MavenBuild",
    "MavenDependency",
    "MavenExecution",
    "MavenPlugin",
    "Plugin",
    "Repository",
    "VersionReference",
    "default_registry",
]
