"""Explicit registry of build system backends.

The registry maps build system ids to adapter factories.  It is populated
once at process start (``default_registry``) and passed to the project
generator; nothing is discovered implicitly.
"""

from __future__ import annotations

from typing import Callable

from ..config import GeneratorConfig
from ..errors import UnsupportedBuildSystem
from .base import BuildSystemAdapter
from .gradle import GradleAdapter, GradleKotlinAdapter
from .maven import MavenAdapter

AdapterFactory = Callable[[], BuildSystemAdapter]


class BuildSystemRegistry:
    """Mapping of build system id to the factory creating its adapter."""

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def register(self, build_system: str, factory: AdapterFactory) -> None:
        if build_system in self._factories:
            raise ValueError(f"Build system '{build_system}' is already registered")
        self._factories[build_system] = factory

    def ids(self) -> list[str]:
        return list(self._factories)

    def supports(self, build_system: str) -> bool:
        return build_system in self._factories

    def resolve(self, build_system: str) -> BuildSystemAdapter:
        """Create the adapter registered for *build_system*.

        Raises:
            UnsupportedBuildSystem: If no adapter is registered for the id.
        """
        factory = self._factories.get(build_system)
        if factory is None:
            raise UnsupportedBuildSystem(build_system, self.ids())
        adapter = factory()
        if not adapter.supports(build_system):
            raise UnsupportedBuildSystem(build_system, self.ids())
        return adapter

    def __contains__(self, build_system: object) -> bool:
        return build_system in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def default_registry(config: GeneratorConfig | None = None) -> BuildSystemRegistry:
    """Registry with the Maven, Gradle (Groovy) and Gradle (Kotlin) backends."""
    config = config or GeneratorConfig()
    maven_indent = config.indent.for_content("maven")
    gradle_indent = config.indent.for_content("gradle")

    registry = BuildSystemRegistry()
    registry.register("maven", lambda: MavenAdapter(maven_indent))
    registry.register("gradle", lambda: GradleAdapter(gradle_indent))
    registry.register("gradle-groovy", lambda: GradleAdapter(gradle_indent))
    registry.register("gradle-kotlin", lambda: GradleKotlinAdapter(gradle_indent))
    return registry
