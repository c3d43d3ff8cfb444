"""Tests for the Maven backend (initforge.buildsystem.maven).

Covers:
- Exact pom.xml layout for a minimal project
- Scope mapping, optional flags, exclusions
- Dependency management, properties, repositories
- Plugin configuration rendering
- Validation policy
- Determinism and file writing
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from initforge.buildsystem.gradle import GradleBuild, GradleDependency
from initforge.buildsystem.maven import (
    MavenAdapter,
    MavenBuild,
    MavenDependency,
    MavenExecution,
    MavenPlugin,
    is_optional,
    singular,
)
from initforge.buildsystem.model import (
    MAVEN_CENTRAL,
    BillOfMaterials,
    Dependency,
    DependencyScope,
    Exclusion,
    Plugin,
    Repository,
    VersionReference,
)
from initforge.errors import BuildValidationError

pytestmark = pytest.mark.unit

NS = {"m": "http://maven.apache.org/POM/4.0.0"}


# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def adapter() -> MavenAdapter:
    return MavenAdapter("\t")


@pytest.fixture
def build() -> MavenBuild:
    build = MavenBuild()
    settings = build.settings
    settings.group = "com.example"
    settings.artifact = "demo"
    settings.version = "0.0.1-SNAPSHOT"
    settings.name = "demo"
    settings.description = "Demo project"
    return build


def parse(text: str) -> ET.Element:
    return ET.fromstring(text.encode("utf-8"))


def dependency_elements(root: ET.Element) -> dict[str, ET.Element]:
    return {
        element.findtext("m:artifactId", namespaces=NS): element
        for element in root.findall("m:dependencies/m:dependency", NS)
    }


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

MINIMAL_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
\txsi:schemaLocation="http://maven.apache.org/POM/4.0.0 https://maven.apache.org/xsd/maven-4.0.0.xsd">
\t<modelVersion>4.0.0</modelVersion>
\t<parent>
\t\t<groupId>org.springframework.boot</groupId>
\t\t<artifactId>spring-boot-starter-parent</artifactId>
\t\t<version>3.4.1</version>
\t\t<relativePath/> <!-- lookup parent from repository -->
\t</parent>
\t<groupId>com.example</groupId>
\t<artifactId>demo</artifactId>
\t<version>0.0.1-SNAPSHOT</version>
\t<name>demo</name>
\t<description>Demo project</description>

\t<properties>
\t\t<java.version>17</java.version>
\t</properties>

\t<dependencies>
\t\t<dependency>
\t\t\t<groupId>org.springframework.boot</groupId>
\t\t\t<artifactId>spring-boot-starter-web</artifactId>
\t\t</dependency>

\t\t<dependency>
\t\t\t<groupId>org.springframework.boot</groupId>
\t\t\t<artifactId>spring-boot-starter-test</artifactId>
\t\t\t<scope>test</scope>
\t\t</dependency>
\t</dependencies>

\t<build>
\t\t<plugins>
\t\t\t<plugin>
\t\t\t\t<groupId>org.springframework.boot</groupId>
\t\t\t\t<artifactId>spring-boot-maven-plugin</artifactId>
\t\t\t</plugin>
\t\t</plugins>
\t</build>

</project>
"""


class TestLayout:
    def test_minimal_pom(self, adapter, build):
        build.set_parent("org.springframework.boot", "spring-boot-starter-parent", "3.4.1")
        build.properties.property("java.version", "17")
        build.add_dependency("test", Dependency(
            "org.springframework.boot", "spring-boot-starter-test", scope=DependencyScope.TEST_COMPILE
        ))
        build.add_dependency("web", Dependency("org.springframework.boot", "spring-boot-starter-web"))
        build.add_plugin("spring-boot", Plugin("org.springframework.boot:spring-boot-maven-plugin"))

        assert adapter.serialize(build) == {"pom.xml": MINIMAL_POM}

    def test_jar_packaging_omitted(self, adapter, build):
        assert "<packaging>" not in adapter.serialize(build)["pom.xml"]

    def test_war_packaging(self, adapter, build):
        build.settings.packaging = "war"
        root = parse(adapter.serialize(build)["pom.xml"])
        assert root.findtext("m:packaging", namespaces=NS) == "war"

    def test_text_is_escaped(self, adapter, build):
        build.settings.description = "Tom & Jerry <demo>"
        text = adapter.serialize(build)["pom.xml"]
        assert "<description>Tom &amp; Jerry &lt;demo&gt;</description>" in text
        assert parse(text).findtext("m:description", namespaces=NS) == "Tom & Jerry <demo>"

    def test_no_parent(self, adapter, build):
        root = parse(adapter.serialize(build)["pom.xml"])
        assert root.find("m:parent", NS) is None

    def test_indent_is_configurable(self, build):
        text = MavenAdapter("  ").serialize(build)["pom.xml"]
        assert "\n  <modelVersion>4.0.0</modelVersion>\n" in text


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class TestDependencies:
    @pytest.mark.parametrize(
        "scope, expected",
        [
            (DependencyScope.COMPILE, None),
            (DependencyScope.RUNTIME, "runtime"),
            (DependencyScope.PROVIDED_RUNTIME, "provided"),
            (DependencyScope.TEST_COMPILE, "test"),
            (DependencyScope.TEST_RUNTIME, "test"),
            (DependencyScope.COMPILE_ONLY, None),
            (DependencyScope.ANNOTATION_PROCESSOR, None),
        ],
    )
    def test_scope_mapping(self, adapter, build, scope, expected):
        build.add_dependency("lib", Dependency("org.acme", "lib", scope=scope))
        element = dependency_elements(parse(adapter.serialize(build)["pom.xml"]))["lib"]
        assert element.findtext("m:scope", namespaces=NS) == expected

    @pytest.mark.parametrize("scope", [DependencyScope.COMPILE_ONLY, DependencyScope.ANNOTATION_PROCESSOR])
    def test_compile_only_kinds_are_optional(self, adapter, build, scope):
        build.add_dependency("lombok", Dependency("org.projectlombok", "lombok", scope=scope))
        element = dependency_elements(parse(adapter.serialize(build)["pom.xml"]))["lombok"]
        assert element.findtext("m:optional", namespaces=NS) == "true"

    def test_optional_flag(self, adapter, build):
        devtools = MavenDependency(
            "org.springframework.boot", "spring-boot-devtools", scope=DependencyScope.RUNTIME, optional=True
        )
        build.add_dependency("devtools", devtools)
        element = dependency_elements(parse(adapter.serialize(build)["pom.xml"]))["spring-boot-devtools"]
        assert element.findtext("m:scope", namespaces=NS) == "runtime"
        assert element.findtext("m:optional", namespaces=NS) == "true"

    def test_groups_by_scope(self, adapter, build):
        build.add_dependency("test", Dependency("g", "test-lib", scope=DependencyScope.TEST_COMPILE))
        build.add_dependency("h2", Dependency("g", "h2", scope=DependencyScope.RUNTIME))
        build.add_dependency("web", Dependency("g", "web"))
        root = parse(adapter.serialize(build)["pom.xml"])
        assert list(dependency_elements(root)) == ["web", "h2", "test-lib"]

    def test_version_and_type(self, adapter, build):
        build.add_dependency("lib", Dependency.of("g", "lib", "1.2.3", type="pom"))
        build.add_dependency("managed", Dependency("g", "managed", VersionReference.of_property("managed.version")))
        elements = dependency_elements(parse(adapter.serialize(build)["pom.xml"]))
        assert elements["lib"].findtext("m:version", namespaces=NS) == "1.2.3"
        assert elements["lib"].findtext("m:type", namespaces=NS) == "pom"
        assert elements["managed"].findtext("m:version", namespaces=NS) == "${managed.version}"

    def test_exclusions(self, adapter, build):
        build.add_dependency("test", Dependency(
            "org.springframework.boot",
            "spring-boot-starter-test",
            scope=DependencyScope.TEST_COMPILE,
            exclusions=(Exclusion("org.junit.vintage", "junit-vintage-engine"),),
        ))
        element = dependency_elements(parse(adapter.serialize(build)["pom.xml"]))["spring-boot-starter-test"]
        exclusion = element.find("m:exclusions/m:exclusion", NS)
        assert exclusion.findtext("m:groupId", namespaces=NS) == "org.junit.vintage"
        assert exclusion.findtext("m:artifactId", namespaces=NS) == "junit-vintage-engine"

    def test_is_optional_helper(self):
        assert not is_optional(Dependency("g", "a"))
        assert is_optional(MavenDependency("g", "a", optional=True))
        assert is_optional(Dependency("g", "a", scope=DependencyScope.COMPILE_ONLY))


class TestMavenDependency:
    def test_from_dependency_keeps_fields(self):
        base = Dependency.of("g", "a", "1.0", scope=DependencyScope.RUNTIME)
        converted = MavenDependency.from_dependency(base, optional=True)
        assert converted.identity == base.identity
        assert converted.scope is DependencyScope.RUNTIME
        assert converted.optional

    def test_from_dependency_preserves_existing_flag(self):
        flagged = MavenDependency("g", "a", optional=True)
        assert MavenDependency.from_dependency(flagged).optional


# ---------------------------------------------------------------------------
# Dependency management, properties, repositories
# ---------------------------------------------------------------------------


class TestDependencyManagement:
    def test_boms_sorted_by_order(self, adapter, build):
        build.boms.add("late", BillOfMaterials("g", "late-bom", VersionReference.of_value("1"), order=100))
        build.boms.add("early", BillOfMaterials("g", "early-bom", VersionReference.of_property("early.version"), order=10))
        root = parse(adapter.serialize(build)["pom.xml"])
        boms = root.findall("m:dependencyManagement/m:dependencies/m:dependency", NS)
        assert [bom.findtext("m:artifactId", namespaces=NS) for bom in boms] == ["early-bom", "late-bom"]
        assert boms[0].findtext("m:version", namespaces=NS) == "${early.version}"
        assert boms[0].findtext("m:type", namespaces=NS) == "pom"
        assert boms[0].findtext("m:scope", namespaces=NS) == "import"

    def test_version_properties_follow_plain_properties(self, adapter, build):
        build.properties.version("spring-cloud.version", "2024.0.0")
        build.properties.property("java.version", "17")
        root = parse(adapter.serialize(build)["pom.xml"])
        names = [child.tag.split("}")[1] for child in root.find("m:properties", NS)]
        assert names == ["java.version", "spring-cloud.version"]


class TestRepositories:
    def test_central_is_implicit(self, adapter, build):
        build.add_repository("maven-central", MAVEN_CENTRAL)
        assert "<repositories>" not in adapter.serialize(build)["pom.xml"]

    def test_snapshot_repository(self, adapter, build):
        build.add_repository("maven-central", MAVEN_CENTRAL)
        build.add_repository(
            "spring-snapshots",
            Repository("Spring Snapshots", "https://repo.spring.io/snapshot", False, True),
        )
        root = parse(adapter.serialize(build)["pom.xml"])
        repositories = root.findall("m:repositories/m:repository", NS)
        assert len(repositories) == 1
        repository = repositories[0]
        assert repository.findtext("m:id", namespaces=NS) == "spring-snapshots"
        assert repository.findtext("m:releases/m:enabled", namespaces=NS) == "false"
        assert repository.findtext("m:snapshots/m:enabled", namespaces=NS) == "true"

    def test_release_repository_has_no_policy_elements(self, adapter, build):
        build.add_repository("milestones", Repository("Spring Milestones", "https://repo.spring.io/milestone"))
        repository = parse(adapter.serialize(build)["pom.xml"]).find("m:repositories/m:repository", NS)
        assert repository.find("m:releases", NS) is None
        assert repository.find("m:snapshots", NS) is None

    def test_plugin_repositories(self, adapter, build):
        build.plugin_repositories.add("milestones", Repository("Spring Milestones", "https://repo.spring.io/milestone"))
        root = parse(adapter.serialize(build)["pom.xml"])
        assert root.find("m:repositories", NS) is None
        assert root.findtext("m:pluginRepositories/m:pluginRepository/m:id", namespaces=NS) == "milestones"


# ---------------------------------------------------------------------------
# Build section
# ---------------------------------------------------------------------------


class TestBuildSection:
    def test_plugin_configuration(self, adapter, build):
        build.add_plugin(
            "kotlin",
            Plugin(
                "org.jetbrains.kotlin:kotlin-maven-plugin",
                configuration={"args": ["-Xjsr305=strict"], "compilerPlugins": ["spring"], "verbose": True},
            ),
        )
        root = parse(adapter.serialize(build)["pom.xml"])
        configuration = root.find("m:build/m:plugins/m:plugin/m:configuration", NS)
        assert configuration.findtext("m:args/m:arg", namespaces=NS) == "-Xjsr305=strict"
        assert configuration.findtext("m:compilerPlugins/m:plugin", namespaces=NS) == "spring"
        assert configuration.findtext("m:verbose", namespaces=NS) == "true"

    def test_nested_mapping(self, adapter, build):
        build.add_plugin(
            "boot",
            Plugin(
                "org.springframework.boot:spring-boot-maven-plugin",
                configuration={"excludes": [{"groupId": "org.projectlombok", "artifactId": "lombok"}]},
            ),
        )
        root = parse(adapter.serialize(build)["pom.xml"])
        exclude = root.find("m:build/m:plugins/m:plugin/m:configuration/m:excludes/m:exclude", NS)
        assert exclude.findtext("m:artifactId", namespaces=NS) == "lombok"

    def test_plugin_dependencies(self, adapter, build):
        build.add_plugin(
            "kotlin",
            MavenPlugin(
                "org.jetbrains.kotlin:kotlin-maven-plugin",
                dependencies=(
                    Dependency("org.jetbrains.kotlin", "kotlin-maven-allopen", VersionReference.of_property("kotlin.version")),
                ),
            ),
        )
        plugin = parse(adapter.serialize(build)["pom.xml"]).find("m:build/m:plugins/m:plugin", NS)
        dependency = plugin.find("m:dependencies/m:dependency", NS)
        assert dependency.findtext("m:artifactId", namespaces=NS) == "kotlin-maven-allopen"
        assert dependency.findtext("m:version", namespaces=NS) == "${kotlin.version}"
        assert dependency.find("m:scope", NS) is None

    def test_plugin_executions_follow_configuration(self, adapter, build):
        build.add_plugin(
            "gmavenplus",
            MavenPlugin(
                "org.codehaus.gmavenplus:gmavenplus-plugin",
                "4.1.1",
                configuration={"verbose": True},
                executions=(MavenExecution(goals=("addSources", "compile")),),
            ),
        )
        pom = adapter.serialize(build)["pom.xml"]
        assert pom.index("<configuration>") < pom.index("<executions>")
        plugin = parse(pom).find("m:build/m:plugins/m:plugin", NS)
        assert plugin.findtext("m:version", namespaces=NS) == "4.1.1"
        execution = plugin.find("m:executions/m:execution", NS)
        assert execution.find("m:id", NS) is None
        assert [goal.text for goal in execution.findall("m:goals/m:goal", NS)] == ["addSources", "compile"]

    def test_from_plugin_keeps_coordinates(self):
        plugin = MavenPlugin.from_plugin(Plugin("g:a", "1.0", configuration={"x": "y"}), executions=(MavenExecution("e"),))
        assert (plugin.coordinate, plugin.version, plugin.configuration) == ("g:a", "1.0", {"x": "y"})
        assert plugin.executions == (MavenExecution("e"),)

    def test_source_directories(self, adapter, build):
        build.source_directory = "${project.basedir}/src/main/kotlin"
        build.test_source_directory = "${project.basedir}/src/test/kotlin"
        root = parse(adapter.serialize(build)["pom.xml"])
        assert root.findtext("m:build/m:sourceDirectory", namespaces=NS) == "${project.basedir}/src/main/kotlin"
        assert root.findtext("m:build/m:testSourceDirectory", namespaces=NS) == "${project.basedir}/src/test/kotlin"
        assert root.find("m:build/m:plugins", NS) is None

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("excludes", "exclude"),
            ("annotationProcessorPaths", "path"),
            ("args", "arg"),
            ("compilerPlugins", "plugin"),
            ("dependencies", "dependency"),
            ("classes", "class"),
            ("jvmArguments", "argument"),
        ],
    )
    def test_singular(self, name, expected):
        assert singular(name) == expected


# ---------------------------------------------------------------------------
# Adapter contract
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_coordinates(self, adapter):
        with pytest.raises(BuildValidationError) as exc_info:
            adapter.serialize(MavenBuild())
        assert exc_info.value.build_system == "maven"
        assert len(exc_info.value.problems) == 3

    def test_gradle_configuration_rejected(self, adapter, build):
        build.add_dependency(
            "devtools",
            GradleDependency("org.springframework.boot", "spring-boot-devtools", configuration="developmentOnly"),
        )
        with pytest.raises(BuildValidationError, match="developmentOnly"):
            adapter.serialize(build)

    def test_malformed_plugin_coordinate(self, adapter, build):
        build.add_plugin("boot", Plugin("org.springframework.boot"))
        with pytest.raises(BuildValidationError, match="groupId:artifactId"):
            adapter.validate(build)

    def test_wrong_build_flavour(self, adapter):
        build = GradleBuild()
        build.settings.group, build.settings.artifact, build.settings.version = "g", "a", "1"
        assert adapter.problems(build) == ["expected a MavenBuild, got GradleBuild"]


class TestAdapter:
    def test_identity(self, adapter):
        assert adapter.supports("maven")
        assert not adapter.supports("gradle")
        assert adapter.descriptor_files == ("pom.xml",)
        assert isinstance(adapter.create_build(), MavenBuild)

    def test_deterministic(self, adapter, build):
        build.add_dependency("web", Dependency("g", "web"))
        build.properties.version("x.version", "1")
        assert adapter.serialize(build) == adapter.serialize(build)

    async def test_write(self, adapter, build, tmp_path):
        written = await adapter.write(build, tmp_path)
        assert written == [tmp_path / "pom.xml"]
        assert (tmp_path / "pom.xml").read_text(encoding="utf-8") == adapter.serialize(build)["pom.xml"]

    async def test_invalid_build_writes_nothing(self, adapter, tmp_path):
        with pytest.raises(BuildValidationError):
            await adapter.write(MavenBuild(), tmp_path)
        assert not (tmp_path / "pom.xml").exists()
