"""Dependency metadata: the catalog the generator resolves dependency ids against.

The generation core only talks to a ``MetadataProvider``.  ``Catalog`` is the
in-memory implementation backed by pydantic models, loaded from a JSON or
YAML file (a bundled default catalog ships with the package).

Catalog entries may carry *mappings*: per platform-version-range overrides
of coordinates, versions, BOMs and repositories.  ``resolve`` picks the first
mapping whose range matches the requested platform version.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, Field, model_validator

from .buildsystem.model import (
    BillOfMaterials,
    Build,
    Dependency,
    DependencyScope,
    Plugin,
    Repository,
    VersionReference,
)
from .errors import IncompatibleDependency, UnknownDependency, UnknownPlugin
from .version import Version, VersionParser

_DEFAULT_CATALOG = Path(__file__).parent / "data" / "catalog.json"

SCOPES: dict[str, DependencyScope] = {
    "compile": DependencyScope.COMPILE,
    "runtime": DependencyScope.RUNTIME,
    "compileOnly": DependencyScope.COMPILE_ONLY,
    "annotationProcessor": DependencyScope.ANNOTATION_PROCESSOR,
    "provided": DependencyScope.PROVIDED_RUNTIME,
    "test": DependencyScope.TEST_COMPILE,
}

ROOT_STARTER_ID = "root_starter"


# ---------------------------------------------------------------------------
# Catalog models
# ---------------------------------------------------------------------------


class DependencyMapping(BaseModel):
    """Coordinates override applying to a platform version range."""

    compatibility_range: str
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    bom: str | None = None
    repository: str | None = None


class DependencyMetadata(BaseModel):
    """A selectable dependency of the catalog."""

    id: str
    group_id: str
    artifact_id: str
    version: str | None = None
    scope: str = "compile"
    type: str | None = None
    starter: bool = True
    facets: list[str] = Field(default_factory=list)
    bom: str | None = None
    repository: str | None = None
    compatibility_range: str | None = None
    mappings: list[DependencyMapping] = Field(default_factory=list)

    @model_validator(mode="after")
    def _known_scope(self) -> "DependencyMetadata":
        if self.scope not in SCOPES:
            raise ValueError(f"unknown scope '{self.scope}' (expected one of {sorted(SCOPES)})")
        return self

    def is_compatible_with(self, version: Version, parser: VersionParser) -> bool:
        if not self.compatibility_range:
            return True
        return parser.parse_range(self.compatibility_range).match(version)

    def resolve(self, version: Version, parser: VersionParser) -> "DependencyMetadata":
        """Apply the first mapping matching *version*."""
        for mapping in self.mappings:
            if parser.parse_range(mapping.compatibility_range).match(version):
                overrides = mapping.model_dump(exclude={"compatibility_range"}, exclude_none=True)
                return self.model_copy(update={**overrides, "mappings": []})
        return self

    def to_dependency(self) -> Dependency:
        return Dependency.of(
            self.group_id,
            self.artifact_id,
            self.version,
            scope=SCOPES[self.scope],
            type=self.type,
        )


class BomMapping(BaseModel):
    compatibility_range: str
    version: str | None = None
    repositories: list[str] | None = None
    additional_boms: list[str] | None = None


class BomMetadata(BaseModel):
    """A bill of materials referenced by dependencies."""

    id: str
    group_id: str
    artifact_id: str
    version: str | None = None
    version_property: str | None = None
    order: int = 2**31 - 1
    repositories: list[str] = Field(default_factory=list)
    additional_boms: list[str] = Field(default_factory=list)
    mappings: list[BomMapping] = Field(default_factory=list)

    def resolve(self, version: Version, parser: VersionParser) -> "BomMetadata":
        """Apply the mapping matching *version*.

        Raises:
            IncompatibleDependency: If mappings exist but none matches.
        """
        if not self.mappings:
            return self
        for mapping in self.mappings:
            if parser.parse_range(mapping.compatibility_range).match(version):
                overrides = mapping.model_dump(exclude={"compatibility_range"}, exclude_none=True)
                return self.model_copy(update={**overrides, "mappings": []})
        ranges = ", ".join(mapping.compatibility_range for mapping in self.mappings)
        raise IncompatibleDependency(self.id, str(version), ranges)

    def to_bom(self) -> BillOfMaterials:
        if self.version_property:
            reference = VersionReference.of_property(self.version_property)
        else:
            reference = VersionReference.of_value(self.version) if self.version else None
        return BillOfMaterials(self.group_id, self.artifact_id, reference, order=self.order)


class RepositoryMetadata(BaseModel):
    id: str
    name: str
    url: str
    releases_enabled: bool = True
    snapshots_enabled: bool = False

    def to_repository(self) -> Repository:
        return Repository(
            name=self.name,
            url=self.url,
            releases_enabled=self.releases_enabled,
            snapshots_enabled=self.snapshots_enabled,
        )


class PluginMetadata(BaseModel):
    """A build plugin known to the catalog, with its per-backend coordinates.

    Maven plugin versions are managed by the parent POM unless
    ``maven_version`` is set.  ``platform_versioned`` plugins take the platform
    version on Gradle, others use ``version``.
    """

    id: str
    maven_coordinate: str | None = None
    maven_version: str | None = None
    gradle_id: str | None = None
    version: str | None = None
    platform_versioned: bool = False

    def to_plugin(self, build_system: str, platform_version: str) -> Plugin:
        if build_system == "maven":
            if self.maven_coordinate is None:
                raise UnknownPlugin(f"{self.id} (no Maven coordinate)")
            return Plugin(self.maven_coordinate, self.maven_version)
        if self.gradle_id is None:
            raise UnknownPlugin(f"{self.id} (no Gradle plugin id)")
        version = platform_version if self.platform_versioned else self.version
        return Plugin(self.gradle_id, version)


class ParentPomMetadata(BaseModel):
    group_id: str
    artifact_id: str
    version: str
    include_platform_bom: bool = True


class PlatformMetadata(BaseModel):
    """Coordinates of the platform itself (parent POM, BOM, starters)."""

    group_id: str = "org.springframework.boot"
    parent_artifact_id: str = "spring-boot-starter-parent"
    bom_artifact_id: str = "spring-boot-dependencies"
    bom_version_property: str = "spring-boot.version"
    starter_prefix: str = "spring-boot-starter"
    custom_parent: ParentPomMetadata | None = None
    versions: list[str] = Field(default_factory=list)

    def parent_pom(self, platform_version: str) -> ParentPomMetadata:
        """The parent POM for *platform_version*: the custom one or the platform's."""
        if self.custom_parent is not None:
            return self.custom_parent
        return ParentPomMetadata(
            group_id=self.group_id,
            artifact_id=self.parent_artifact_id,
            version=platform_version,
            include_platform_bom=False,
        )

    def is_platform_parent(self, parent: ParentPomMetadata) -> bool:
        return parent.group_id == self.group_id and parent.artifact_id == self.parent_artifact_id

    def platform_bom(self, platform_version: str) -> BomMetadata:
        return BomMetadata(
            id="platform",
            group_id=self.group_id,
            artifact_id=self.bom_artifact_id,
            version=platform_version,
            version_property=self.bom_version_property,
        )

    def starter(self, name: str = "", scope: str = "compile") -> DependencyMetadata:
        """Metadata of a platform starter (``""`` is the root starter)."""
        artifact_id = f"{self.starter_prefix}-{name}" if name else self.starter_prefix
        return DependencyMetadata(
            id=name or ROOT_STARTER_ID,
            group_id=self.group_id,
            artifact_id=artifact_id,
            scope=scope,
        )


class Catalog(BaseModel):
    """The whole dependency catalog."""

    platform: PlatformMetadata = Field(default_factory=PlatformMetadata)
    dependencies: list[DependencyMetadata] = Field(default_factory=list)
    boms: list[BomMetadata] = Field(default_factory=list)
    repositories: list[RepositoryMetadata] = Field(default_factory=list)
    plugins: list[PluginMetadata] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> "Catalog":
        for kind in ("dependencies", "boms", "repositories", "plugins"):
            seen: set[str] = set()
            for entry in getattr(self, kind):
                if entry.id in seen:
                    raise ValueError(f"duplicate {kind} id '{entry.id}'")
                seen.add(entry.id)
        return self

    @classmethod
    def load(cls, path: str | Path) -> "Catalog":
        """Load a catalog from a ``.json``, ``.yml`` or ``.yaml`` file."""
        source = Path(path)
        raw = source.read_text(encoding="utf-8")
        if source.suffix in (".yml", ".yaml"):
            return cls.model_validate(yaml.safe_load(raw) or {})
        return cls.model_validate_json(raw)

    @classmethod
    def default(cls) -> "Catalog":
        """The catalog bundled with initforge."""
        return cls.load(_DEFAULT_CATALOG)


# ---------------------------------------------------------------------------
# Provider contract
# ---------------------------------------------------------------------------


@runtime_checkable
class MetadataProvider(Protocol):
    """Lookup contract the generation core uses to resolve ids."""

    @property
    def platform(self) -> PlatformMetadata: ...

    @property
    def version_parser(self) -> VersionParser: ...

    def get_dependency(self, dependency_id: str) -> DependencyMetadata | None: ...

    def resolve_dependency(self, dependency_id: str, platform_version: Version) -> DependencyMetadata: ...

    def resolve_bom(self, bom_id: str, platform_version: Version) -> BomMetadata: ...

    def get_repository(self, repository_id: str) -> RepositoryMetadata | None: ...

    def resolve_plugin(self, plugin_id: str) -> PluginMetadata: ...


class CatalogMetadataProvider:
    """``MetadataProvider`` answering from a ``Catalog``.

    The provider is read-only and may be shared by concurrent generations.
    """

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self._dependencies = {entry.id: entry for entry in catalog.dependencies}
        self._boms = {entry.id: entry for entry in catalog.boms}
        self._repositories = {entry.id: entry for entry in catalog.repositories}
        self._plugins = {entry.id: entry for entry in catalog.plugins}
        known = [Version.safe_parse(text) for text in catalog.platform.versions]
        self._parser = VersionParser([version for version in known if version is not None])

    @classmethod
    def from_path(cls, path: str | Path | None = None) -> "CatalogMetadataProvider":
        return cls(Catalog.load(path) if path else Catalog.default())

    @property
    def platform(self) -> PlatformMetadata:
        return self.catalog.platform

    @property
    def version_parser(self) -> VersionParser:
        return self._parser

    def get_dependency(self, dependency_id: str) -> DependencyMetadata | None:
        return self._dependencies.get(dependency_id)

    def resolve_dependency(self, dependency_id: str, platform_version: Version) -> DependencyMetadata:
        """Resolve *dependency_id* for *platform_version*.

        Raises:
            UnknownDependency: If the id is not in the catalog.
            IncompatibleDependency: If the dependency does not support the platform version.
        """
        metadata = self._dependencies.get(dependency_id)
        if metadata is None:
            raise UnknownDependency(dependency_id)
        if not metadata.is_compatible_with(platform_version, self._parser):
            raise IncompatibleDependency(
                dependency_id, str(platform_version), metadata.compatibility_range or ""
            )
        return metadata.resolve(platform_version, self._parser)

    def resolve_bom(self, bom_id: str, platform_version: Version) -> BomMetadata:
        metadata = self._boms.get(bom_id)
        if metadata is None:
            raise UnknownDependency(bom_id)
        return metadata.resolve(platform_version, self._parser)

    def get_repository(self, repository_id: str) -> RepositoryMetadata | None:
        return self._repositories.get(repository_id)

    def resolve_plugin(self, plugin_id: str) -> PluginMetadata:
        metadata = self._plugins.get(plugin_id)
        if metadata is None:
            raise UnknownPlugin(plugin_id)
        return metadata


# ---------------------------------------------------------------------------
# Build helpers
# ---------------------------------------------------------------------------


def catalog_dependencies(build: Build, provider: MetadataProvider) -> list[DependencyMetadata]:
    """Catalog entries of the dependencies registered in *build*, in build order."""
    entries = (provider.get_dependency(dependency_id) for dependency_id in build.list_dependency_ids())
    return [entry for entry in entries if entry is not None]


def has_facet(build: Build, facet: str, provider: MetadataProvider) -> bool:
    """Return ``True`` if a registered dependency declares *facet*."""
    return any(facet in entry.facets for entry in catalog_dependencies(build, provider))
