"""Maven backend: ``pom.xml`` serialization.

Dependency kinds map to Maven scopes:

==========================  ===============================
Kind                        Maven
==========================  ===============================
compile                     no scope
runtime                     ``runtime``
provided-runtime            ``provided``
test-compile, test-runtime  ``test``
compile-only                no scope, ``<optional>true``
annotation-processor        no scope, ``<optional>true``
==========================  ===============================

Plugins are a flat ``<build><plugins>`` list.  Their configuration mapping is
rendered as nested XML; list values are wrapped in elements named after the
singular of the enclosing element (``excludes`` -> ``exclude``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping
from xml.sax.saxutils import escape

from .base import BuildSystemAdapter
from .model import (
    MAVEN_CENTRAL,
    BillOfMaterials,
    Build,
    Dependency,
    DependencyScope,
    Plugin,
    Repository,
    VersionReference,
)
from .writer import IndentingWriter

POM_FILE = "pom.xml"

_COORDINATE_REGEX = re.compile(r"^[^:\s]+:[^:\s]+$")

_SCOPES: dict[DependencyScope, str | None] = {
    DependencyScope.COMPILE: None,
    DependencyScope.RUNTIME: "runtime",
    DependencyScope.COMPILE_ONLY: None,
    DependencyScope.ANNOTATION_PROCESSOR: None,
    DependencyScope.PROVIDED_RUNTIME: "provided",
    DependencyScope.TEST_COMPILE: "test",
    DependencyScope.TEST_RUNTIME: "test",
}

# Emission order of dependency groups inside <dependencies>.
_SCOPE_GROUPS: tuple[tuple[DependencyScope, ...], ...] = (
    (DependencyScope.COMPILE,),
    (DependencyScope.RUNTIME,),
    (DependencyScope.COMPILE_ONLY,),
    (DependencyScope.ANNOTATION_PROCESSOR,),
    (DependencyScope.PROVIDED_RUNTIME,),
    (DependencyScope.TEST_COMPILE, DependencyScope.TEST_RUNTIME),
)


# ---------------------------------------------------------------------------
# Maven specific model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MavenDependency(Dependency):
    """A dependency that may be flagged ``<optional>``."""

    optional: bool = False

    @classmethod
    def from_dependency(cls, dependency: Dependency, **changes: Any) -> "MavenDependency":
        values = dependency.base_fields()
        values["optional"] = getattr(dependency, "optional", False)
        values.update(changes)
        return cls(**values)


@dataclass(frozen=True)
class MavenExecution:
    """A plugin execution: goals bound to a lifecycle phase."""

    id: str | None = None
    phase: str | None = None
    goals: tuple[str, ...] = ()


@dataclass(frozen=True)
class MavenPlugin(Plugin):
    """A plugin with executions and dependencies of its own.

    Plugin dependencies only carry coordinates and a version; their scope and
    exclusions are ignored.
    """

    executions: tuple[MavenExecution, ...] = ()
    dependencies: tuple[Dependency, ...] = ()

    @classmethod
    def from_plugin(cls, plugin: Plugin, **changes: Any) -> "MavenPlugin":
        values: dict[str, Any] = {
            "coordinate": plugin.coordinate,
            "version": plugin.version,
            "configuration": plugin.configuration,
            "executions": getattr(plugin, "executions", ()),
            "dependencies": getattr(plugin, "dependencies", ()),
        }
        values.update(changes)
        return cls(**values)


@dataclass(frozen=True)
class MavenParent:
    group_id: str
    artifact_id: str
    version: str


class MavenBuild(Build):
    """Maven flavour of the build model (parent POM and source directories)."""

    build_system = "maven"

    def __init__(self) -> None:
        super().__init__()
        self.parent: MavenParent | None = None
        self.source_directory: str | None = None
        self.test_source_directory: str | None = None

    def set_parent(self, group_id: str, artifact_id: str, version: str) -> MavenParent:
        self.parent = MavenParent(group_id, artifact_id, version)
        return self.parent


def is_optional(dependency: Dependency) -> bool:
    if getattr(dependency, "optional", False):
        return True
    return dependency.scope in (DependencyScope.COMPILE_ONLY, DependencyScope.ANNOTATION_PROCESSOR)


def singular(name: str) -> str:
    """Return the element name used for items of the list element *name*.

    ``excludes`` -> ``exclude``, ``annotationProcessorPaths`` -> ``path``.
    """
    words = re.findall(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])", name)
    last = (words[-1] if words else name).lower()
    if last.endswith("ies"):
        return last[:-3] + "y"
    if last.endswith("sses"):
        return last[:-2]
    if last.endswith("s") and len(last) > 1:
        return last[:-1]
    return last


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class MavenBuildWriter:
    """Writes a ``MavenBuild`` as a ``pom.xml`` document."""

    def write(self, build: MavenBuild, writer: IndentingWriter) -> None:
        writer.println('<?xml version="1.0" encoding="UTF-8"?>')
        writer.println(
            '<project xmlns="http://maven.apache.org/POM/4.0.0" '
            'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
        )
        with writer.indented():
            writer.println(
                'xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 '
                'https://maven.apache.org/xsd/maven-4.0.0.xsd">'
            )
            self._element(writer, "modelVersion", "4.0.0")
            self._write_parent(writer, build)
            self._write_coordinates(writer, build)
            self._write_properties(writer, build)
            self._write_dependencies(writer, build)
            self._write_dependency_management(writer, build)
            self._write_build(writer, build)
            self._write_repositories(writer, build)
        writer.println()
        writer.println("</project>")

    # -- Sections ----------------------------------------------------------

    def _write_parent(self, writer: IndentingWriter, build: MavenBuild) -> None:
        parent = build.parent
        if parent is None:
            return
        with writer.block("<parent>", "</parent>"):
            self._element(writer, "groupId", parent.group_id)
            self._element(writer, "artifactId", parent.artifact_id)
            self._element(writer, "version", parent.version)
            writer.println("<relativePath/> <!-- lookup parent from repository -->")

    def _write_coordinates(self, writer: IndentingWriter, build: MavenBuild) -> None:
        settings = build.settings
        self._element(writer, "groupId", settings.group)
        self._element(writer, "artifactId", settings.artifact)
        self._element(writer, "version", settings.version)
        if settings.packaging and settings.packaging != "jar":
            self._element(writer, "packaging", settings.packaging)
        self._element(writer, "name", settings.name)
        self._element(writer, "description", settings.description)

    def _write_properties(self, writer: IndentingWriter, build: MavenBuild) -> None:
        if build.properties.is_empty():
            return
        writer.println()
        with writer.block("<properties>", "</properties>"):
            for key, value in build.properties.values():
                self._element(writer, key, value)
            for key, value in build.properties.versions():
                self._element(writer, key, value)

    def _write_dependencies(self, writer: IndentingWriter, build: MavenBuild) -> None:
        if build.dependencies.is_empty():
            return
        dependencies = build.dependencies.items()
        writer.println()
        with writer.block("<dependencies>", "</dependencies>"):
            for index, scopes in enumerate(_SCOPE_GROUPS):
                group = [dep for dep in dependencies if dep.scope in scopes]
                for dependency in group:
                    self._write_dependency(writer, dependency)
                # Compile dependencies are separated from the rest by a blank line.
                if index == 0 and group and len(group) < len(dependencies):
                    writer.println()

    def _write_dependency(self, writer: IndentingWriter, dependency: Dependency) -> None:
        with writer.block("<dependency>", "</dependency>"):
            self._element(writer, "groupId", dependency.group_id)
            self._element(writer, "artifactId", dependency.artifact_id)
            self._element(writer, "version", _version(dependency.version))
            self._element(writer, "scope", _SCOPES[dependency.scope])
            if is_optional(dependency):
                self._element(writer, "optional", "true")
            self._element(writer, "type", dependency.type)
            if dependency.exclusions:
                with writer.block("<exclusions>", "</exclusions>"):
                    for exclusion in dependency.exclusions:
                        with writer.block("<exclusion>", "</exclusion>"):
                            self._element(writer, "groupId", exclusion.group_id)
                            self._element(writer, "artifactId", exclusion.artifact_id)

    def _write_dependency_management(self, writer: IndentingWriter, build: MavenBuild) -> None:
        if build.boms.is_empty():
            return
        boms = sorted(build.boms.items(), key=lambda bom: bom.order)
        writer.println()
        with writer.block("<dependencyManagement>", "</dependencyManagement>"):
            with writer.block("<dependencies>", "</dependencies>"):
                for bom in boms:
                    self._write_bom(writer, bom)

    def _write_bom(self, writer: IndentingWriter, bom: BillOfMaterials) -> None:
        with writer.block("<dependency>", "</dependency>"):
            self._element(writer, "groupId", bom.group_id)
            self._element(writer, "artifactId", bom.artifact_id)
            self._element(writer, "version", _version(bom.version))
            self._element(writer, "type", "pom")
            self._element(writer, "scope", "import")

    def _write_build(self, writer: IndentingWriter, build: MavenBuild) -> None:
        if (
            build.source_directory is None
            and build.test_source_directory is None
            and build.plugins.is_empty()
        ):
            return
        writer.println()
        with writer.block("<build>", "</build>"):
            self._element(writer, "sourceDirectory", build.source_directory)
            self._element(writer, "testSourceDirectory", build.test_source_directory)
            if build.plugins.is_empty():
                return
            with writer.block("<plugins>", "</plugins>"):
                for plugin in build.plugins.items():
                    group_id, artifact_id = plugin.coordinate.split(":", 1)
                    with writer.block("<plugin>", "</plugin>"):
                        self._element(writer, "groupId", group_id)
                        self._element(writer, "artifactId", artifact_id)
                        self._element(writer, "version", plugin.version)
                        self._write_configuration(writer, plugin.configuration)
                        self._write_executions(writer, getattr(plugin, "executions", ()))
                        self._write_plugin_dependencies(writer, getattr(plugin, "dependencies", ()))

    def _write_configuration(self, writer: IndentingWriter, configuration: Mapping[str, Any]) -> None:
        if configuration:
            with writer.block("<configuration>", "</configuration>"):
                self._write_settings(writer, configuration)

    def _write_executions(self, writer: IndentingWriter, executions: tuple[MavenExecution, ...]) -> None:
        if not executions:
            return
        with writer.block("<executions>", "</executions>"):
            for execution in executions:
                with writer.block("<execution>", "</execution>"):
                    self._element(writer, "id", execution.id)
                    self._element(writer, "phase", execution.phase)
                    if execution.goals:
                        with writer.block("<goals>", "</goals>"):
                            for goal in execution.goals:
                                self._element(writer, "goal", goal)

    def _write_plugin_dependencies(self, writer: IndentingWriter, dependencies: tuple[Dependency, ...]) -> None:
        if not dependencies:
            return
        with writer.block("<dependencies>", "</dependencies>"):
            for dependency in dependencies:
                with writer.block("<dependency>", "</dependency>"):
                    self._element(writer, "groupId", dependency.group_id)
                    self._element(writer, "artifactId", dependency.artifact_id)
                    self._element(writer, "version", _version(dependency.version))

    def _write_settings(self, writer: IndentingWriter, settings: Mapping[str, Any]) -> None:
        for name, value in settings.items():
            self._write_setting(writer, name, value)

    def _write_setting(self, writer: IndentingWriter, name: str, value: Any) -> None:
        if isinstance(value, Mapping):
            with writer.block(f"<{name}>", f"</{name}>"):
                self._write_settings(writer, value)
        elif isinstance(value, (list, tuple)):
            with writer.block(f"<{name}>", f"</{name}>"):
                for item in value:
                    self._write_setting(writer, singular(name), item)
        else:
            self._element(writer, name, _text(value))

    def _write_repositories(self, writer: IndentingWriter, build: MavenBuild) -> None:
        repositories = _without_central(build.repositories.entries())
        plugin_repositories = _without_central(build.plugin_repositories.entries())
        if not repositories and not plugin_repositories:
            return
        writer.println()
        if repositories:
            self._write_repository_list(writer, "repositories", "repository", repositories)
        if plugin_repositories:
            self._write_repository_list(
                writer, "pluginRepositories", "pluginRepository", plugin_repositories
            )

    def _write_repository_list(
        self,
        writer: IndentingWriter,
        container: str,
        child: str,
        repositories: list[tuple[str, Repository]],
    ) -> None:
        with writer.block(f"<{container}>", f"</{container}>"):
            for repository_id, repository in repositories:
                with writer.block(f"<{child}>", f"</{child}>"):
                    self._element(writer, "id", repository_id)
                    self._element(writer, "name", repository.name)
                    self._element(writer, "url", repository.url)
                    if not repository.releases_enabled:
                        with writer.block("<releases>", "</releases>"):
                            self._element(writer, "enabled", "false")
                    if repository.snapshots_enabled:
                        with writer.block("<snapshots>", "</snapshots>"):
                            self._element(writer, "enabled", "true")

    @staticmethod
    def _element(writer: IndentingWriter, name: str, text: str | None) -> None:
        if text is not None:
            writer.println(f"<{name}>{escape(text)}</{name}>")


def _version(reference: VersionReference | None) -> str | None:
    if reference is None:
        return None
    return f"${{{reference.property_name}}}" if reference.is_property else reference.value


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _without_central(entries: list[tuple[str, Repository]]) -> list[tuple[str, Repository]]:
    return [(rid, repo) for rid, repo in entries if repo.identity != MAVEN_CENTRAL.identity]


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class MavenAdapter(BuildSystemAdapter):
    """Backend adapter for Maven (``pom.xml``)."""

    id = "maven"
    content_id = "maven"

    @property
    def descriptor_files(self) -> tuple[str, ...]:
        return (POM_FILE,)

    def create_build(self) -> MavenBuild:
        return MavenBuild()

    def problems(self, build: Build) -> list[str]:
        problems: list[str] = []
        if not isinstance(build, MavenBuild):
            problems.append(f"expected a MavenBuild, got {type(build).__name__}")
        for field_name in ("group", "artifact", "version"):
            if not getattr(build.settings, field_name):
                problems.append(f"project {field_name} is not set")
        for dependency_id, dependency in build.dependencies.entries():
            configuration = getattr(dependency, "configuration", None)
            if configuration is not None:
                problems.append(
                    f"dependency '{dependency_id}' uses Gradle configuration "
                    f"'{configuration}' which has no Maven equivalent"
                )
        for plugin_id, plugin in build.plugins.entries():
            if not _COORDINATE_REGEX.match(plugin.coordinate):
                problems.append(
                    f"plugin '{plugin_id}' coordinate '{plugin.coordinate}' "
                    "is not of the form groupId:artifactId"
                )
        return problems

    def render(self, build: Build) -> dict[str, str]:
        writer = IndentingWriter(self.indent)
        MavenBuildWriter().write(build, writer)  # type: ignore[arg-type]
        return {POM_FILE: writer.getvalue()}
