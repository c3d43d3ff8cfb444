"""Backend-agnostic build model.

A ``Build`` is the in-memory representation of a project's build descriptor:
settings, properties, dependencies, BOMs, plugins and repositories.  Every
collection is keyed by a logical id and preserves insertion order.  The model
performs no I/O; backend adapters turn it into descriptor files.

Merge policy for duplicate ids: each item kind defines an *identity* (the
coordinates of a dependency, the coordinate of a plugin, the URL of a
repository).  Re-registering an id with the same identity replaces the entry
(last write wins for version, scope and backend flags); re-registering it with
a different identity raises a ``ConflictingDefinition`` subclass.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Generic, Iterator, Mapping, TypeVar

from ..errors import (
    ConflictingDefinition,
    ConflictingDependencyDefinition,
    ConflictingPluginDefinition,
    ConflictingRepositoryDefinition,
)


# ---------------------------------------------------------------------------
# Build items
# ---------------------------------------------------------------------------


class DependencyScope(str, Enum):
    """Generic dependency kind, mapped to scopes or configurations by backends."""

    COMPILE = "compile"
    RUNTIME = "runtime"
    COMPILE_ONLY = "compileOnly"
    ANNOTATION_PROCESSOR = "annotationProcessor"
    PROVIDED_RUNTIME = "providedRuntime"
    TEST_COMPILE = "testCompile"
    TEST_RUNTIME = "testRuntime"


@dataclass(frozen=True)
class VersionReference:
    """Either a literal version or a reference to a version property."""

    value: str | None = None
    property_name: str | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.property_name is None):
            raise ValueError("a version reference needs exactly one of 'value' or 'property_name'")

    @classmethod
    def of_value(cls, value: str) -> "VersionReference":
        return cls(value=value)

    @classmethod
    def of_property(cls, name: str) -> "VersionReference":
        return cls(property_name=name)

    @property
    def is_property(self) -> bool:
        return self.property_name is not None

    def __str__(self) -> str:
        return f"${{{self.property_name}}}" if self.is_property else str(self.value)


@dataclass(frozen=True)
class Exclusion:
    group_id: str
    artifact_id: str


@dataclass(frozen=True)
class Dependency:
    """A dependency entry.

    Identity is ``(group_id, artifact_id)``; every other field may be
    overridden by a later registration of the same id.
    """

    group_id: str
    artifact_id: str
    version: VersionReference | None = None
    scope: DependencyScope = DependencyScope.COMPILE
    type: str | None = None
    exclusions: tuple[Exclusion, ...] = ()

    @classmethod
    def of(
        cls,
        group_id: str,
        artifact_id: str,
        version: str | None = None,
        scope: DependencyScope = DependencyScope.COMPILE,
        **kwargs: Any,
    ) -> "Dependency":
        """Shortcut accepting a literal version string."""
        reference = VersionReference.of_value(version) if version else None
        return cls(group_id, artifact_id, version=reference, scope=scope, **kwargs)

    @property
    def identity(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)

    def with_changes(self, **changes: Any) -> "Dependency":
        """Return a copy of this dependency (same class) with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def base_fields(self) -> dict[str, Any]:
        """Fields shared by every dependency flavour, for backend conversions."""
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(Dependency)}

    def __str__(self) -> str:
        text = f"{self.group_id}:{self.artifact_id}"
        if self.version is not None:
            text += f":{self.version}"
        return text


@dataclass(frozen=True)
class BillOfMaterials:
    """An imported BOM; lower ``order`` is declared first."""

    group_id: str
    artifact_id: str
    version: VersionReference | None = None
    order: int = 2**31 - 1

    @property
    def identity(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class Plugin:
    """A build plugin.

    ``coordinate`` is backend-native: ``groupId:artifactId`` for Maven, the
    plugin id for Gradle.  ``configuration`` is an opaque nested mapping that
    backends render (or reject) according to their documented policy.
    """

    coordinate: str
    version: str | None = None
    configuration: Mapping[str, Any] = field(default_factory=dict, compare=True, hash=False)

    @property
    def identity(self) -> str:
        return self.coordinate

    def __str__(self) -> str:
        return self.coordinate if self.version is None else f"{self.coordinate}:{self.version}"


@dataclass(frozen=True)
class Repository:
    """A remote artifact repository with its release/snapshot policy."""

    name: str
    url: str
    releases_enabled: bool = True
    snapshots_enabled: bool = False

    @property
    def identity(self) -> str:
        return self.url.rstrip("/")

    def __str__(self) -> str:
        return f"{self.name} ({self.url})"


MAVEN_CENTRAL_ID = "maven-central"
MAVEN_CENTRAL = Repository(name="Maven Central", url="https://repo.maven.apache.org/maven2")


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

T = TypeVar("T")


class BuildItemContainer(Generic[T]):
    """Insertion-ordered mapping of logical id to build item."""

    conflict_error: ClassVar[type[ConflictingDefinition]] = ConflictingDefinition

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    def _identity(self, item: T) -> Any:
        return getattr(item, "identity", item)

    def add(self, item_id: str, item: T) -> T:
        """Register *item* under *item_id*.

        Re-registering an id with the same identity replaces the previous entry
        in place; a different identity raises ``conflict_error``.
        """
        existing = self._items.get(item_id)
        if existing is not None and self._identity(existing) != self._identity(item):
            raise self.conflict_error(item_id, existing, item)
        self._items[item_id] = item
        return item

    def get(self, item_id: str) -> T | None:
        return self._items.get(item_id)

    def has(self, item_id: str) -> bool:
        return item_id in self._items

    def remove(self, item_id: str) -> bool:
        """Remove *item_id*; returns ``False`` if it was not registered."""
        return self._items.pop(item_id, None) is not None

    def ids(self) -> list[str]:
        return list(self._items)

    def items(self) -> list[T]:
        return list(self._items.values())

    def entries(self) -> list[tuple[str, T]]:
        return list(self._items.items())

    def is_empty(self) -> bool:
        return not self._items

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


class DependencyContainer(BuildItemContainer[Dependency]):
    conflict_error = ConflictingDependencyDefinition


class BomContainer(BuildItemContainer[BillOfMaterials]):
    conflict_error = ConflictingDependencyDefinition


class PluginContainer(BuildItemContainer[Plugin]):
    conflict_error = ConflictingPluginDefinition

    def has_coordinate(self, coordinate: str) -> bool:
        return any(plugin.coordinate == coordinate for plugin in self._items.values())


class RepositoryContainer(BuildItemContainer[Repository]):
    conflict_error = ConflictingRepositoryDefinition


class PropertyContainer:
    """Free-form build properties plus version properties.

    Version properties hold the versions referenced through
    ``VersionReference.of_property``.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._versions: dict[str, str] = {}

    def property(self, key: str, value: str) -> "PropertyContainer":
        self._values[key] = value
        return self

    def version(self, key: str, value: str) -> "PropertyContainer":
        self._versions[key] = value
        return self

    def has(self, key: str) -> bool:
        return key in self._values or key in self._versions

    def get(self, key: str) -> str | None:
        return self._values.get(key, self._versions.get(key))

    def values(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    def versions(self) -> list[tuple[str, str]]:
        return list(self._versions.items())

    def is_empty(self) -> bool:
        return not self._values and not self._versions


@dataclass
class BuildSettings:
    """Top-level project coordinates written by every backend."""

    group: str | None = None
    artifact: str | None = None
    version: str | None = None
    name: str | None = None
    description: str | None = None
    packaging: str = "jar"


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


class Build:
    """Backend-agnostic build descriptor.

    Backends subclass this to carry constructs that only exist in their own
    vocabulary (a Maven parent POM, Gradle tasks and configurations).  One
    instance is created per generation and owned by the project generator.
    """

    build_system: ClassVar[str] = "generic"

    def __init__(self) -> None:
        self.settings = BuildSettings()
        self.properties = PropertyContainer()
        self.dependencies = DependencyContainer()
        self.boms = BomContainer()
        self.plugins = PluginContainer()
        self.repositories = RepositoryContainer()
        self.plugin_repositories = RepositoryContainer()

    # -- Dependencies ------------------------------------------------------

    def add_dependency(self, dependency_id: str, dependency: Dependency) -> Dependency:
        return self.dependencies.add(dependency_id, dependency)

    def get_dependency(self, dependency_id: str) -> Dependency | None:
        return self.dependencies.get(dependency_id)

    def has_dependency(self, dependency_id: str) -> bool:
        return self.dependencies.has(dependency_id)

    def list_dependency_ids(self) -> list[str]:
        return self.dependencies.ids()

    # -- Plugins -----------------------------------------------------------

    def add_plugin(self, plugin_id: str, plugin: Plugin) -> Plugin:
        return self.plugins.add(plugin_id, plugin)

    def get_plugin(self, plugin_id: str) -> Plugin | None:
        return self.plugins.get(plugin_id)

    def has_plugin(self, plugin_id: str) -> bool:
        return self.plugins.has(plugin_id)

    def list_plugin_ids(self) -> list[str]:
        return self.plugins.ids()

    # -- Repositories ------------------------------------------------------

    def add_repository(self, repository_id: str, repository: Repository) -> Repository:
        return self.repositories.add(repository_id, repository)

    def get_repository(self, repository_id: str) -> Repository | None:
        return self.repositories.get(repository_id)

    def has_repository(self, repository_id: str) -> bool:
        return self.repositories.has(repository_id)

    def list_repository_ids(self) -> list[str]:
        return self.repositories.ids()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dependencies={self.dependencies.ids()}, "
            f"plugins={self.plugins.ids()}, repositories={self.repositories.ids()})"
        )
