"""Customizer pipeline and the standard build customizers.

Customizers run after every contributor and only mutate the build model.
They are sorted like contributors, by ``(order, registration index)``, and
every customizer is idempotent: running it twice leaves the model as running
it once did.

Customizers that need configuration are produced by factory functions
(``optional_dependency_customizer("devtools")``) rather than by subclassing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, runtime_checkable

from ..buildsystem.gradle import GradleBuild, GradleDependency
from ..buildsystem.maven import MavenBuild, MavenDependency, MavenExecution, MavenPlugin
from ..buildsystem.model import (
    MAVEN_CENTRAL,
    MAVEN_CENTRAL_ID,
    Build,
    Dependency,
    DependencyScope,
    Exclusion,
    Plugin,
    Repository,
    VersionReference,
)
from ..description import ProjectDescription
from ..metadata import (
    ROOT_STARTER_ID,
    BomMetadata,
    DependencyMetadata,
    MetadataProvider,
    catalog_dependencies,
    has_facet,
)
from ..version import Version, VersionRange
from .contributors import HIGHEST_PRECEDENCE, LOWEST_PRECEDENCE, PipelineState, sort_by_order

SPRING_MILESTONES_ID = "spring-milestones"
SPRING_MILESTONES = Repository(
    name="Spring Milestones",
    url="https://repo.spring.io/milestone",
    releases_enabled=True,
    snapshots_enabled=False,
)
SPRING_SNAPSHOTS_ID = "spring-snapshots"
SPRING_SNAPSHOTS = Repository(
    name="Spring Snapshots",
    url="https://repo.spring.io/snapshot",
    releases_enabled=False,
    snapshots_enabled=True,
)

_PLATFORM_4_0_MILESTONES_OR_LATER = VersionRange.parse("4.0.0-M1")
_PLATFORM_4_OR_LATER = VersionRange.parse("4.0.0")
_DEVELOPMENT_ONLY_BUILT_IN = VersionRange.parse("2.3.0.RC1")
_LEGACY_JUNIT = VersionRange.parse("[2.2.0.M3,2.4.0-M1)")
_GROOVY_4 = VersionRange.parse("3.0.0-M2")

GMAVENPLUS_GOALS = (
    "addSources",
    "addTestSources",
    "generateStubs",
    "compile",
    "generateTestStubs",
    "compileTests",
    "removeStubs",
    "removeTestStubs",
)


# ---------------------------------------------------------------------------
# Customizer contract
# ---------------------------------------------------------------------------


@runtime_checkable
class BuildCustomizer(Protocol):
    """A unit mutating the build model once contributors are done."""

    order: int

    def customize(self, build: Build) -> None: ...


@dataclass(frozen=True)
class FunctionCustomizer:
    """A customizer made of a plain function, as built by the factories below."""

    name: str
    function: Callable[[Build], None]
    order: int = 0

    def customize(self, build: Build) -> None:
        self.function(build)

    def __repr__(self) -> str:
        return f"FunctionCustomizer({self.name!r}, order={self.order})"


class CustomizerPipeline:
    """Applies customizers once, in ascending ``(order, registration)`` sequence."""

    def __init__(self, customizers: Iterable[BuildCustomizer] = ()) -> None:
        self._customizers: list[BuildCustomizer] = list(customizers)
        self.state = PipelineState.PENDING
        self.current: int | None = None

    def register(self, customizer: BuildCustomizer) -> None:
        if self.state is not PipelineState.PENDING:
            raise RuntimeError("cannot register a customizer once the pipeline has started")
        self._customizers.append(customizer)

    def ordered(self) -> list[BuildCustomizer]:
        return sort_by_order(self._customizers)

    def run(self, build: Build) -> None:
        if self.state is not PipelineState.PENDING:
            raise RuntimeError(f"customizer pipeline already {self.state.value}")
        self.state = PipelineState.RUNNING
        for index, customizer in enumerate(self.ordered()):
            self.current = index
            customizer.customize(build)
        self.current = None
        self.state = PipelineState.DONE

    def __len__(self) -> int:
        return len(self._customizers)


# ---------------------------------------------------------------------------
# Factory customizers
# ---------------------------------------------------------------------------


def project_settings_customizer(description: ProjectDescription) -> FunctionCustomizer:
    """Copy the project coordinates into the build settings."""

    def customize(build: Build) -> None:
        settings = build.settings
        settings.group = description.group_id
        settings.artifact = description.artifact_id
        settings.version = description.version
        settings.name = description.name
        settings.description = description.description
        settings.packaging = description.packaging

    return FunctionCustomizer("project-settings", customize, order=HIGHEST_PRECEDENCE)


def optional_dependency_customizer(dependency_id: str) -> FunctionCustomizer:
    """Flag *dependency_id* as ``<optional>`` in Maven builds."""

    def customize(build: Build) -> None:
        dependency = build.get_dependency(dependency_id)
        if dependency is None or not isinstance(build, MavenBuild):
            return
        build.add_dependency(dependency_id, MavenDependency.from_dependency(dependency, optional=True))

    return FunctionCustomizer(f"optional-{dependency_id}", customize)


def development_only_customizer(dependency_id: str, platform_version: Version) -> FunctionCustomizer:
    """Move *dependency_id* to the ``developmentOnly`` configuration in Gradle builds.

    Platforms before 2.3.0.RC1 do not provide that configuration, so it is
    declared and wired into ``runtimeClasspath``.
    """

    def customize(build: Build) -> None:
        dependency = build.get_dependency(dependency_id)
        if dependency is None or not isinstance(build, GradleBuild):
            return
        if not _DEVELOPMENT_ONLY_BUILT_IN.match(platform_version):
            build.configurations.add("developmentOnly")
            build.configurations.customize("runtimeClasspath", "developmentOnly")
        build.add_dependency(
            dependency_id,
            GradleDependency.from_dependency(dependency, configuration="developmentOnly"),
        )

    return FunctionCustomizer(f"development-only-{dependency_id}", customize)


# ---------------------------------------------------------------------------
# Starters
# ---------------------------------------------------------------------------


def _metadata_or_starter(
    provider: MetadataProvider, dependency_id: str, starter: str, scope: str = "compile"
) -> DependencyMetadata:
    metadata = provider.get_dependency(dependency_id)
    if metadata is not None:
        return metadata
    return provider.platform.starter(starter, scope=scope)


class DefaultStarterCustomizer:
    """Adds the root starter when no compile-scoped starter is registered."""

    order = LOWEST_PRECEDENCE - 8

    def __init__(self, provider: MetadataProvider) -> None:
        self.provider = provider

    def customize(self, build: Build) -> None:
        if build.has_dependency(ROOT_STARTER_ID):
            return
        entries = catalog_dependencies(build, self.provider)
        if any(entry.starter and entry.scope == "compile" for entry in entries):
            return
        starter = self.provider.platform.starter("")
        build.add_dependency(ROOT_STARTER_ID, starter.to_dependency())


class DefaultTestStarterCustomizer:
    """Adds the platform test starter.

    On platforms ``[2.2.0.M3,2.4.0-M1)`` the starter still pulls JUnit 4
    through the vintage engine, which is excluded.
    """

    order = 0
    dependency_id = "test"

    def __init__(self, provider: MetadataProvider, platform_version: Version) -> None:
        self.provider = provider
        self.platform_version = platform_version

    def customize(self, build: Build) -> None:
        metadata = _metadata_or_starter(self.provider, self.dependency_id, "test", scope="test")
        dependency = metadata.to_dependency()
        if _LEGACY_JUNIT.match(self.platform_version):
            dependency = dependency.with_changes(
                exclusions=(Exclusion("org.junit.vintage", "junit-vintage-engine"),)
            )
        build.add_dependency(self.dependency_id, dependency)


class WarPackagingWebStarterCustomizer:
    """Makes a war deployable: a web starter plus a provided servlet container.

    Gradle builds on platform 4.0.0 or later use the dedicated
    ``tomcat-runtime`` starter instead of a provided ``tomcat``.
    """

    order = LOWEST_PRECEDENCE - 10

    def __init__(self, provider: MetadataProvider, description: ProjectDescription) -> None:
        self.provider = provider
        self.description = description

    def customize(self, build: Build) -> None:
        version = self.description.parsed_platform_version
        if not has_facet(build, "web", self.provider):
            web = _metadata_or_starter(self.provider, "web", "web")
            build.add_dependency(web.id, web.resolve(version, self.provider.version_parser).to_dependency())
        if isinstance(build, GradleBuild) and _PLATFORM_4_OR_LATER.match(version):
            build.dependencies.remove("tomcat")
            runtime = self.provider.platform.starter("tomcat-runtime", scope="provided")
            build.add_dependency("tomcat-runtime", runtime.to_dependency())
            return
        tomcat = _metadata_or_starter(self.provider, "tomcat", "tomcat")
        provided = tomcat.resolve(version, self.provider.version_parser).to_dependency()
        build.add_dependency("tomcat", provided.with_changes(scope=DependencyScope.PROVIDED_RUNTIME))


# ---------------------------------------------------------------------------
# Dependency management and repositories
# ---------------------------------------------------------------------------


class DependencyManagementCustomizer:
    """Imports the BOMs and repositories required by registered dependencies.

    BOMs are resolved for the platform version, together with the BOMs they
    declare as additional; each BOM with a version property contributes that
    property to the build.
    """

    order = LOWEST_PRECEDENCE - 5

    def __init__(self, provider: MetadataProvider, description: ProjectDescription) -> None:
        self.provider = provider
        self.description = description

    def customize(self, build: Build) -> None:
        version = self.description.parsed_platform_version
        boms: dict[str, BomMetadata] = {}
        repository_ids: list[str] = []
        for dependency_id in build.list_dependency_ids():
            entry = self.provider.get_dependency(dependency_id)
            if entry is None:
                continue
            entry = entry.resolve(version, self.provider.version_parser)
            if entry.bom:
                self._resolve_bom(boms, entry.bom, version)
            if entry.repository and entry.repository not in repository_ids:
                repository_ids.append(entry.repository)
        for bom in boms.values():
            for repository_id in bom.repositories:
                if repository_id not in repository_ids:
                    repository_ids.append(repository_id)

        for bom_id, bom in boms.items():
            build.boms.add(bom_id, bom.to_bom())
            if bom.version_property and bom.version:
                build.properties.version(bom.version_property, bom.version)
        for repository_id in repository_ids:
            repository = self.provider.get_repository(repository_id)
            if repository is not None:
                build.add_repository(repository_id, repository.to_repository())

    def _resolve_bom(self, boms: dict[str, BomMetadata], bom_id: str, version: Version) -> None:
        if bom_id in boms:
            return
        resolved = self.provider.resolve_bom(bom_id, version)
        boms[bom_id] = resolved
        for additional in resolved.additional_boms:
            self._resolve_bom(boms, additional, version)


class PlatformRepositoriesCustomizer:
    """Adds the repositories the platform version is published to.

    Maven Central always; milestone releases also need the milestone
    repository (until 4.0.0-M1, from which milestones ship to Maven Central);
    snapshots need the snapshot repository, plus the milestone one unless the
    snapshot is a maintenance release.
    """

    order = 0

    def __init__(self, provider: MetadataProvider, platform_version: Version) -> None:
        self.provider = provider
        self.platform_version = platform_version

    def customize(self, build: Build) -> None:
        build.add_repository(MAVEN_CENTRAL_ID, MAVEN_CENTRAL)
        version = self.platform_version
        if version.is_release:
            return
        if version.is_snapshot:
            if version.patch == 0:
                self._add_milestones(build)
            self._add(build, SPRING_SNAPSHOTS_ID, SPRING_SNAPSHOTS)
        else:
            self._add_milestones(build)

    def _add_milestones(self, build: Build) -> None:
        if _PLATFORM_4_0_MILESTONES_OR_LATER.match(self.platform_version):
            return
        self._add(build, SPRING_MILESTONES_ID, SPRING_MILESTONES)

    def _add(self, build: Build, repository_id: str, fallback: Repository) -> None:
        metadata = self.provider.get_repository(repository_id)
        repository = metadata.to_repository() if metadata is not None else fallback
        build.add_repository(repository_id, repository)
        build.plugin_repositories.add(repository_id, repository)


# ---------------------------------------------------------------------------
# Kotlin
# ---------------------------------------------------------------------------


class KotlinJacksonCustomizer:
    """Adds the Jackson Kotlin module to Kotlin projects handling JSON."""

    order = 0

    def __init__(self, provider: MetadataProvider, description: ProjectDescription) -> None:
        self.provider = provider
        self.description = description

    def customize(self, build: Build) -> None:
        if self.description.language != "kotlin" or not has_facet(build, "json", self.provider):
            return
        if _PLATFORM_4_OR_LATER.match(self.description.parsed_platform_version):
            group_id = "tools.jackson.module"
        else:
            group_id = "com.fasterxml.jackson.module"
        build.add_dependency("jackson-module-kotlin", Dependency(group_id, "jackson-module-kotlin"))


class KotlinDependenciesCustomizer:
    """Adds Kotlin reflection and the Kotlin JUnit 5 test library."""

    order = 0

    def customize(self, build: Build) -> None:
        build.add_dependency("kotlin-reflect", Dependency("org.jetbrains.kotlin", "kotlin-reflect"))
        build.add_dependency(
            "kotlin-test-junit5",
            Dependency("org.jetbrains.kotlin", "kotlin-test-junit5", scope=DependencyScope.TEST_COMPILE),
        )


# ---------------------------------------------------------------------------
# Groovy
# ---------------------------------------------------------------------------


class GroovyDependenciesCustomizer:
    """Adds the Groovy library, published under ``org.apache.groovy`` since Groovy 4."""

    order = 0

    def __init__(self, platform_version: Version) -> None:
        self.platform_version = platform_version

    def customize(self, build: Build) -> None:
        group_id = "org.apache.groovy" if _GROOVY_4.match(self.platform_version) else "org.codehaus.groovy"
        build.add_dependency("groovy", Dependency(group_id, "groovy"))


class GroovyMavenBuildCustomizer:
    """Compiles Groovy sources with the GMavenPlus plugin."""

    order = 0

    def __init__(self, provider: MetadataProvider, description: ProjectDescription) -> None:
        self.provider = provider
        self.description = description

    def customize(self, build: Build) -> None:
        if not isinstance(build, MavenBuild):
            return
        plugin = self.provider.resolve_plugin("gmavenplus").to_plugin("maven", self.description.platform_version)
        execution = MavenExecution(goals=GMAVENPLUS_GOALS)
        build.add_plugin("gmavenplus", MavenPlugin.from_plugin(plugin, executions=(execution,)))


# ---------------------------------------------------------------------------
# Build system defaults
# ---------------------------------------------------------------------------


class DefaultMavenBuildCustomizer:
    """Parent POM, language level, Spring Boot plugin and Kotlin compiler setup.

    A custom parent POM does not manage the platform, so the platform BOM is
    imported and source encodings are set explicitly.
    """

    order = 0

    def __init__(self, provider: MetadataProvider, description: ProjectDescription) -> None:
        self.provider = provider
        self.description = description

    def customize(self, build: Build) -> None:
        if not isinstance(build, MavenBuild):
            return
        description = self.description
        platform = self.provider.platform
        build.properties.property("java.version", description.language_version)

        boot = self.provider.resolve_plugin("spring-boot")
        build.add_plugin("spring-boot", boot.to_plugin("maven", description.platform_version))

        parent = platform.parent_pom(description.platform_version)
        if parent.include_platform_bom:
            bom = platform.platform_bom(description.platform_version)
            if not any(existing.identity == (bom.group_id, bom.artifact_id) for existing in build.boms.items()):
                build.properties.version(platform.bom_version_property, description.platform_version)
                build.boms.add("platform", bom.to_bom())
        if not platform.is_platform_parent(parent):
            build.properties.property("project.build.sourceEncoding", "UTF-8")
            build.properties.property("project.reporting.outputEncoding", "UTF-8")
        build.set_parent(parent.group_id, parent.artifact_id, parent.version)

        if description.language == "kotlin":
            build.source_directory = "${project.basedir}/src/main/kotlin"
            build.test_source_directory = "${project.basedir}/src/test/kotlin"
            kotlin_metadata = self.provider.resolve_plugin("kotlin-jvm")
            if kotlin_metadata.version:
                build.properties.property("kotlin.version", kotlin_metadata.version)
            kotlin = kotlin_metadata.to_plugin("maven", description.platform_version)
            # The ``spring`` compiler plugin is provided by kotlin-maven-allopen.
            allopen = Dependency(
                "org.jetbrains.kotlin", "kotlin-maven-allopen", VersionReference.of_property("kotlin.version")
            )
            build.add_plugin(
                "kotlin-jvm",
                MavenPlugin.from_plugin(
                    kotlin,
                    configuration={"args": ["-Xjsr305=strict"], "compilerPlugins": ["spring"]},
                    dependencies=(allopen,),
                ),
            )


class DefaultGradleBuildCustomizer:
    """Plugins, language level and test task of Gradle builds."""

    order = 0

    def __init__(self, provider: MetadataProvider, description: ProjectDescription) -> None:
        self.provider = provider
        self.description = description

    def customize(self, build: Build) -> None:
        if not isinstance(build, GradleBuild):
            return
        description = self.description
        version = description.platform_version

        if description.language == "kotlin":
            for plugin_id in ("kotlin-jvm", "kotlin-spring"):
                plugin = self.provider.resolve_plugin(plugin_id).to_plugin("gradle", version)
                build.add_plugin(plugin_id, plugin)
            build.extension("kotlin").block("compilerOptions").invoke(
                "freeCompilerArgs.addAll", "-Xjsr305=strict"
            )
        else:
            build.add_plugin(description.language, Plugin(description.language))
        if description.packaging == "war":
            build.add_plugin("war", Plugin("war"))
        for plugin_id in ("spring-boot", "dependency-management"):
            build.add_plugin(plugin_id, self.provider.resolve_plugin(plugin_id).to_plugin("gradle", version))

        build.source_compatibility = description.language_version
        build.task("test", type="Test").invoke("useJUnitPlatform")


class AnnotationProcessorConfigurationCustomizer:
    """Makes ``compileOnly`` see annotation processors (Lombok and friends)."""

    order = 0

    def customize(self, build: Build) -> None:
        if not isinstance(build, GradleBuild):
            return
        if any(dep.scope is DependencyScope.ANNOTATION_PROCESSOR for dep in build.dependencies.items()):
            build.configurations.customize("compileOnly", "annotationProcessor")


__all__ = [
    "AnnotationProcessorConfigurationCustomizer",
    "BuildCustomizer",
    "CustomizerPipeline",
    "DefaultGradleBuildCustomizer",
    "DefaultMavenBuildCustomizer",
    "DefaultStarterCustomizer",
    "DefaultTestStarterCustomizer",
    "DependencyManagementCustomizer",
    "FunctionCustomizer",
    "KotlinDependenciesCustomizer",
    "KotlinJacksonCustomizer",
    "PlatformRepositoriesCustomizer",
    "WarPackagingWebStarterCustomizer",
    "development_only_customizer",
    "optional_dependency_customizer",
    "project_settings_customizer",
]
