"""Gradle backend: Groovy (``build.gradle``) and Kotlin (``build.gradle.kts``) DSLs.

Dependency kinds map to configurations (``implementation``, ``runtimeOnly``,
``compileOnly``, ``annotationProcessor``, ``providedRuntime``,
``testImplementation``, ``testRuntimeOnly``); a ``GradleDependency`` may name
any other configuration explicitly.  Plugins are applied by id and wiring that
Maven would express in plugin configuration lives in tasks, extensions and
configuration customizations of the ``GradleBuild``.

Policy for model features Gradle does not have:

* ``optional`` on a dependency is dropped with a warning on the console.
* A plugin ``configuration`` mapping fails validation, as do Maven plugin
  executions and plugin dependencies.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..utils import print_warning
from .base import BuildSystemAdapter
from .model import (
    MAVEN_CENTRAL,
    BillOfMaterials,
    Build,
    Dependency,
    DependencyScope,
    Exclusion,
    Plugin,
    Repository,
    VersionReference,
)
from .writer import IndentingWriter

_CONFIGURATIONS: dict[DependencyScope, str] = {
    DependencyScope.COMPILE: "implementation",
    DependencyScope.RUNTIME: "runtimeOnly",
    DependencyScope.COMPILE_ONLY: "compileOnly",
    DependencyScope.ANNOTATION_PROCESSOR: "annotationProcessor",
    DependencyScope.PROVIDED_RUNTIME: "providedRuntime",
    DependencyScope.TEST_COMPILE: "testImplementation",
    DependencyScope.TEST_RUNTIME: "testRuntimeOnly",
}

# Configurations with no entry here (custom ones) sort right after compileOnly.
_CONFIGURATION_ORDER: dict[str, int] = {
    "implementation": 0,
    "compileOnly": 1,
    "runtimeOnly": 3,
    "annotationProcessor": 4,
    "providedRuntime": 5,
    "testImplementation": 6,
    "testRuntimeOnly": 7,
}
_CUSTOM_CONFIGURATION_ORDER = 2


# ---------------------------------------------------------------------------
# Gradle specific model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GradleDependency(Dependency):
    """A dependency declared in an explicit (possibly custom) configuration."""

    configuration: str | None = None

    @classmethod
    def from_dependency(cls, dependency: Dependency, **changes: Any) -> "GradleDependency":
        values = dependency.base_fields()
        values["configuration"] = getattr(dependency, "configuration", None)
        values.update(changes)
        return cls(**values)


@dataclass
class GradleBlock:
    """A DSL block: method invocations, property assignments and nested blocks.

    Invocation arguments and assignment values are string literals; the
    dialect writer quotes them.
    """

    name: str
    invocations: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    nested: dict[str, "GradleBlock"] = field(default_factory=dict)

    def invoke(self, method: str, *arguments: str) -> "GradleBlock":
        invocation = (method, tuple(arguments))
        if invocation not in self.invocations:
            self.invocations.append(invocation)
        return self

    def attribute(self, name: str, value: str) -> "GradleBlock":
        self.attributes[name] = value
        return self

    def block(self, name: str) -> "GradleBlock":
        return self.nested.setdefault(name, GradleBlock(name))

    def is_empty(self) -> bool:
        return not self.invocations and not self.attributes and not self.nested


@dataclass
class GradleTask(GradleBlock):
    """Customization of a task.

    The Groovy DSL addresses tasks by name; the Kotlin DSL uses ``withType``
    when ``type`` is set.
    """

    type: str | None = None


class GradleConfigurations:
    """Custom configurations and ``extendsFrom`` customizations."""

    def __init__(self) -> None:
        self._custom: list[str] = []
        self._extends: dict[str, list[str]] = {}

    def add(self, name: str) -> None:
        if name not in self._custom:
            self._custom.append(name)

    def customize(self, name: str, extends_from: str) -> None:
        parents = self._extends.setdefault(name, [])
        if extends_from not in parents:
            parents.append(extends_from)

    def custom(self) -> list[str]:
        return list(self._custom)

    def customizations(self) -> list[tuple[str, list[str]]]:
        return [(name, list(parents)) for name, parents in self._extends.items()]

    def is_custom(self, name: str) -> bool:
        return name in self._custom

    def is_empty(self) -> bool:
        return not self._custom and not self._extends


class GradleBuild(Build):
    """Gradle flavour of the build model."""

    build_system = "gradle"

    def __init__(self) -> None:
        super().__init__()
        self.source_compatibility: str | None = None
        self.configurations = GradleConfigurations()
        self.tasks: dict[str, GradleTask] = {}
        self.extensions: dict[str, GradleBlock] = {}

    def task(self, name: str, type: str | None = None) -> GradleTask:
        """Return the customization of task *name*, creating it on first use."""
        return self.tasks.setdefault(name, GradleTask(name, type=type))

    def extension(self, name: str) -> GradleBlock:
        """Return the top-level extension block *name* (``kotlin``, ``java``...)."""
        return self.extensions.setdefault(name, GradleBlock(name))


def configuration_for(dependency: Dependency) -> str:
    explicit = getattr(dependency, "configuration", None)
    return explicit if explicit else _CONFIGURATIONS[dependency.scope]


# ---------------------------------------------------------------------------
# DSL dialects
# ---------------------------------------------------------------------------


class GradleDsl(ABC):
    """Syntax differences between the Groovy and Kotlin DSLs."""

    build_file: str
    settings_file: str

    @abstractmethod
    def quote(self, value: str) -> str: ...

    @abstractmethod
    def interpolated(self, value: str) -> str:
        """Quote *value* in a string literal that supports ``${}`` interpolation."""

    @abstractmethod
    def property_reference(self, name: str) -> str:
        """Expression reading extra property *name* inside an interpolated string."""

    @abstractmethod
    def plugin(self, plugin: Plugin) -> str: ...

    @abstractmethod
    def assignment(self, name: str, value: str) -> str: ...

    @abstractmethod
    def source_compatibility(self, version: str) -> str: ...

    @abstractmethod
    def maven_repository(self, url: str) -> str: ...

    @abstractmethod
    def write_extra_properties(self, writer: IndentingWriter, properties: list[tuple[str, str]]) -> None: ...

    @abstractmethod
    def write_custom_configurations(self, writer: IndentingWriter, names: list[str]) -> bool:
        """Write custom configuration declarations outside ``configurations {}``.

        Returns ``True`` if anything was written.
        """

    @abstractmethod
    def configuration_declaration(self, name: str) -> str | None:
        """Line declaring custom configuration *name* inside ``configurations {}``."""

    @abstractmethod
    def extends_from(self, parents: list[str], configurations: GradleConfigurations) -> str: ...

    @abstractmethod
    def dependency(self, configuration: str, notation: str, has_exclusions: bool) -> str: ...

    @abstractmethod
    def exclusion(self, exclusion: Exclusion) -> str: ...

    @abstractmethod
    def bom(self, notation: str) -> str: ...

    @abstractmethod
    def task_header(self, task: GradleTask) -> str: ...

    def invocation(self, method: str, arguments: tuple[str, ...]) -> str:
        return f"{method}({', '.join(self.quote(arg) for arg in arguments)})"

    def string(self, value: str) -> str:
        """Quote *value*, switching to an interpolating literal when it uses ``${}``."""
        return self.interpolated(value) if "${" in value else self.quote(value)


class GroovyDsl(GradleDsl):
    build_file = "build.gradle"
    settings_file = "settings.gradle"

    def quote(self, value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def interpolated(self, value: str) -> str:
        return f'"{_escape_outside_templates(value)}"'

    def property_reference(self, name: str) -> str:
        if re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
            return f"${{{name}}}"
        return f"${{property('{name}')}}"

    def plugin(self, plugin: Plugin) -> str:
        text = f"id {self.quote(plugin.coordinate)}"
        if plugin.version:
            text += f" version {self.quote(plugin.version)}"
        return text

    def assignment(self, name: str, value: str) -> str:
        return f"{name} = {self.quote(value)}"

    def source_compatibility(self, version: str) -> str:
        return f"sourceCompatibility = {self.quote(version)}"

    def maven_repository(self, url: str) -> str:
        return f"maven {{ url {self.quote(url)} }}"

    def write_extra_properties(self, writer: IndentingWriter, properties: list[tuple[str, str]]) -> None:
        with writer.block("ext {"):
            for key, value in properties:
                writer.println(f"set({self.quote(key)}, {self.interpolated(value)})")

    def write_custom_configurations(self, writer: IndentingWriter, names: list[str]) -> bool:
        return False

    def configuration_declaration(self, name: str) -> str | None:
        return name

    def extends_from(self, parents: list[str], configurations: GradleConfigurations) -> str:
        return f"extendsFrom {', '.join(parents)}"

    def dependency(self, configuration: str, notation: str, has_exclusions: bool) -> str:
        if has_exclusions:
            return f"{configuration}({notation}) {{"
        return f"{configuration} {notation}"

    def exclusion(self, exclusion: Exclusion) -> str:
        return (
            f"exclude group: {self.quote(exclusion.group_id)}, "
            f"module: {self.quote(exclusion.artifact_id)}"
        )

    def bom(self, notation: str) -> str:
        return f"mavenBom {notation}"

    def task_header(self, task: GradleTask) -> str:
        return f"tasks.named({self.quote(task.name)}) {{"


class KotlinDsl(GradleDsl):
    build_file = "build.gradle.kts"
    settings_file = "settings.gradle.kts"

    def quote(self, value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
        return f'"{escaped}"'

    def interpolated(self, value: str) -> str:
        return f'"{_escape_outside_templates(value)}"'

    def property_reference(self, name: str) -> str:
        return f'${{property("{name}")}}'

    def plugin(self, plugin: Plugin) -> str:
        coordinate = plugin.coordinate
        if coordinate.startswith("org.jetbrains.kotlin."):
            text = f'kotlin("{coordinate[len("org.jetbrains.kotlin."):]}")'
        elif "." not in coordinate:
            text = coordinate if re.fullmatch(r"[a-z]+", coordinate) else f"`{coordinate}`"
        else:
            text = f"id({self.quote(coordinate)})"
        if plugin.version:
            text += f" version {self.quote(plugin.version)}"
        return text

    def assignment(self, name: str, value: str) -> str:
        return f"{name} = {self.quote(value)}"

    def source_compatibility(self, version: str) -> str:
        return f"sourceCompatibility = JavaVersion.VERSION_{version.replace('.', '_')}"

    def maven_repository(self, url: str) -> str:
        return f"maven {{ url = uri({self.quote(url)}) }}"

    def write_extra_properties(self, writer: IndentingWriter, properties: list[tuple[str, str]]) -> None:
        for key, value in properties:
            writer.println(f"extra[{self.quote(key)}] = {self.interpolated(value)}")

    def write_custom_configurations(self, writer: IndentingWriter, names: list[str]) -> bool:
        for name in names:
            writer.println(f"val {name} by configurations.creating")
        return bool(names)

    def configuration_declaration(self, name: str) -> str | None:
        return None

    def extends_from(self, parents: list[str], configurations: GradleConfigurations) -> str:
        references = [
            parent if configurations.is_custom(parent) else f"configurations.{parent}.get()"
            for parent in parents
        ]
        return f"extendsFrom({', '.join(references)})"

    def dependency(self, configuration: str, notation: str, has_exclusions: bool) -> str:
        text = f"{configuration}({notation})"
        return f"{text} {{" if has_exclusions else text

    def exclusion(self, exclusion: Exclusion) -> str:
        return (
            f"exclude(group = {self.quote(exclusion.group_id)}, "
            f"module = {self.quote(exclusion.artifact_id)})"
        )

    def bom(self, notation: str) -> str:
        return f"mavenBom({notation})"

    def task_header(self, task: GradleTask) -> str:
        if task.type:
            return f"tasks.withType<{task.type}> {{"
        return f"tasks.named({self.quote(task.name)}) {{"


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


class GradleBuildWriter:
    """Writes the build script of a ``GradleBuild`` in the given dialect."""

    def __init__(self, dsl: GradleDsl) -> None:
        self.dsl = dsl

    def write(self, build: GradleBuild, writer: IndentingWriter) -> None:
        self._write_plugins(writer, build)
        self._write_coordinates(writer, build)
        self._write_java(writer, build)
        self._write_configurations(writer, build)
        self._write_repositories(writer, build)
        self._write_properties(writer, build)
        self._write_dependencies(writer, build)
        self._write_boms(writer, build)
        self._write_extensions(writer, build)
        self._write_tasks(writer, build)

    def _write_plugins(self, writer: IndentingWriter, build: GradleBuild) -> None:
        if build.plugins.is_empty():
            return
        with writer.block("plugins {"):
            for plugin in build.plugins.items():
                writer.println(self.dsl.plugin(plugin))
        writer.println()

    def _write_coordinates(self, writer: IndentingWriter, build: GradleBuild) -> None:
        settings = build.settings
        written = False
        for name, value in (
            ("group", settings.group),
            ("version", settings.version),
            ("description", settings.description),
        ):
            if value:
                writer.println(self.dsl.assignment(name, value))
                written = True
        if written:
            writer.println()

    def _write_java(self, writer: IndentingWriter, build: GradleBuild) -> None:
        if not build.source_compatibility:
            return
        with writer.block("java {"):
            writer.println(self.dsl.source_compatibility(build.source_compatibility))
        writer.println()

    def _write_configurations(self, writer: IndentingWriter, build: GradleBuild) -> None:
        configurations = build.configurations
        if configurations.is_empty():
            return
        if self.dsl.write_custom_configurations(writer, configurations.custom()):
            writer.println()
        declarations = [
            line
            for line in (self.dsl.configuration_declaration(name) for name in configurations.custom())
            if line
        ]
        customizations = configurations.customizations()
        if not declarations and not customizations:
            return
        with writer.block("configurations {"):
            writer.println_all(declarations)
            for name, parents in customizations:
                with writer.block(f"{name} {{"):
                    writer.println(self.dsl.extends_from(parents, configurations))
        writer.println()

    def _write_repositories(self, writer: IndentingWriter, build: GradleBuild) -> None:
        if build.repositories.is_empty():
            return
        with writer.block("repositories {"):
            for repository in build.repositories.items():
                writer.println(self._repository(repository))
        writer.println()

    def _repository(self, repository: Repository) -> str:
        if repository.identity == MAVEN_CENTRAL.identity:
            return "mavenCentral()"
        return self.dsl.maven_repository(repository.url)

    def _write_properties(self, writer: IndentingWriter, build: GradleBuild) -> None:
        properties = build.properties.values() + build.properties.versions()
        if not properties:
            return
        self.dsl.write_extra_properties(writer, properties)
        writer.println()

    def _write_dependencies(self, writer: IndentingWriter, build: GradleBuild) -> None:
        if build.dependencies.is_empty():
            return
        ordered = sorted(
            build.dependencies.items(),
            key=lambda dep: _CONFIGURATION_ORDER.get(configuration_for(dep), _CUSTOM_CONFIGURATION_ORDER),
        )
        with writer.block("dependencies {"):
            for dependency in ordered:
                notation = self._notation(dependency)
                has_exclusions = bool(dependency.exclusions)
                writer.println(self.dsl.dependency(configuration_for(dependency), notation, has_exclusions))
                if has_exclusions:
                    with writer.indented():
                        for exclusion in dependency.exclusions:
                            writer.println(self.dsl.exclusion(exclusion))
                    writer.println("}")
        writer.println()

    def _notation(self, dependency: Dependency) -> str:
        text = f"{dependency.group_id}:{dependency.artifact_id}"
        version = self._version(dependency.version)
        if version:
            text += f":{version}"
        if dependency.type:
            text += f"@{dependency.type}"
        return self.dsl.string(text)

    def _version(self, reference: VersionReference | None) -> str | None:
        if reference is None:
            return None
        if reference.is_property:
            return self.dsl.property_reference(reference.property_name or "")
        return reference.value

    def _write_boms(self, writer: IndentingWriter, build: GradleBuild) -> None:
        if build.boms.is_empty():
            return
        boms = sorted(build.boms.items(), key=lambda bom: bom.order)
        with writer.block("dependencyManagement {"):
            with writer.block("imports {"):
                for bom in boms:
                    writer.println(self.dsl.bom(self._bom_notation(bom)))
        writer.println()

    def _bom_notation(self, bom: BillOfMaterials) -> str:
        text = f"{bom.group_id}:{bom.artifact_id}"
        version = self._version(bom.version)
        if version:
            text += f":{version}"
        return self.dsl.string(text)

    def _write_extensions(self, writer: IndentingWriter, build: GradleBuild) -> None:
        for extension in build.extensions.values():
            if extension.is_empty():
                continue
            with writer.block(f"{extension.name} {{"):
                self._write_block_body(writer, extension)
            writer.println()

    def _write_tasks(self, writer: IndentingWriter, build: GradleBuild) -> None:
        for task in build.tasks.values():
            with writer.block(self.dsl.task_header(task)):
                self._write_block_body(writer, task)
            writer.println()

    def _write_block_body(self, writer: IndentingWriter, block: GradleBlock) -> None:
        for method, arguments in block.invocations:
            writer.println(self.dsl.invocation(method, arguments))
        for name, value in block.attributes.items():
            writer.println(self.dsl.assignment(name, value))
        for nested in block.nested.values():
            with writer.block(f"{nested.name} {{"):
                self._write_block_body(writer, nested)


class GradleSettingsWriter:
    """Writes ``settings.gradle`` / ``settings.gradle.kts``."""

    def __init__(self, dsl: GradleDsl) -> None:
        self.dsl = dsl

    def write(self, build: GradleBuild, writer: IndentingWriter) -> None:
        if not build.plugin_repositories.is_empty():
            with writer.block("pluginManagement {"):
                with writer.block("repositories {"):
                    for repository in build.plugin_repositories.items():
                        if repository.identity == MAVEN_CENTRAL.identity:
                            writer.println("mavenCentral()")
                        else:
                            writer.println(self.dsl.maven_repository(repository.url))
                    writer.println("gradlePluginPortal()")
            writer.println()
        writer.println(self.dsl.assignment("rootProject.name", build.settings.artifact or ""))


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


class GradleAdapter(BuildSystemAdapter):
    """Backend adapter for Gradle with the Groovy DSL."""

    id = "gradle"
    content_id = "gradle"
    aliases: tuple[str, ...] = ("gradle-groovy",)
    dsl: GradleDsl = GroovyDsl()

    @property
    def descriptor_files(self) -> tuple[str, ...]:
        return (self.dsl.build_file, self.dsl.settings_file)

    def supports(self, build_system: str) -> bool:
        return build_system == self.id or build_system in self.aliases

    def create_build(self) -> GradleBuild:
        return GradleBuild()

    def problems(self, build: Build) -> list[str]:
        problems: list[str] = []
        if not isinstance(build, GradleBuild):
            problems.append(f"expected a GradleBuild, got {type(build).__name__}")
        if not build.settings.artifact:
            problems.append("project artifact is not set")
        for plugin_id, plugin in build.plugins.entries():
            if plugin.configuration:
                problems.append(
                    f"plugin '{plugin_id}' carries a configuration block; "
                    "Gradle plugins are configured through tasks and extensions"
                )
            if getattr(plugin, "executions", ()) or getattr(plugin, "dependencies", ()):
                problems.append(
                    f"plugin '{plugin_id}' carries Maven executions or plugin dependencies "
                    "which have no Gradle equivalent"
                )
        return problems

    def render(self, build: Build) -> dict[str, str]:
        self._warn_dropped_optional_flags(build)
        build_writer = IndentingWriter(self.indent)
        GradleBuildWriter(self.dsl).write(build, build_writer)  # type: ignore[arg-type]
        settings_writer = IndentingWriter(self.indent)
        GradleSettingsWriter(self.dsl).write(build, settings_writer)  # type: ignore[arg-type]
        return {
            self.dsl.build_file: _strip_trailing_blank(build_writer.getvalue()),
            self.dsl.settings_file: settings_writer.getvalue(),
        }

    def _warn_dropped_optional_flags(self, build: Build) -> None:
        # ``optional`` is only understood by Maven; report it once per dependency.
        for dependency_id, dependency in build.dependencies.entries():
            if getattr(dependency, "optional", False):
                print_warning(
                    f"Gradle has no optional dependencies: ignoring optional flag of '{dependency_id}'"
                )


class GradleKotlinAdapter(GradleAdapter):
    """Backend adapter for Gradle with the Kotlin DSL."""

    id = "gradle-kotlin"
    aliases = ()
    dsl = KotlinDsl()


def _strip_trailing_blank(text: str) -> str:
    return text.rstrip("\n") + "\n" if text else text


def _escape_outside_templates(value: str) -> str:
    # ``${...}`` expressions are code, not literal text: leave their quotes alone.
    parts = re.split(r"(\$\{[^}]*\})", value)
    return "".join(
        part if index % 2 else part.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
        for index, part in enumerate(parts)
    )
