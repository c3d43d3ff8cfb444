"""Project description: the immutable input of one generation.

A ``ProjectDescription`` captures everything the caller selected (coordinates,
language, build system, packaging, platform version and dependency ids).  It
is validated at construction and frozen afterwards, so contributors and
customizers can read it freely without coordinating.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import to_application_name, to_package_name
from .version import Version, is_variable

LANGUAGES: dict[str, str] = {
    "java": "java",
    "kotlin": "kt",
    "groovy": "groovy",
}
"""Supported languages mapped to their source file extension."""

PACKAGINGS: tuple[str, ...] = ("jar", "war")


class ProjectDescription(BaseModel):
    """Pydantic model describing the project to generate."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(default="com.example", description="Maven group / Gradle group")
    artifact_id: str = Field(default="demo", description="Artifact identifier")
    version: str = Field(default="0.0.1-SNAPSHOT", description="Version of the generated project")
    name: str = Field(default="", description="Display name; defaults to the artifact id")
    description: str = Field(default="Demo project", description="Short project description")
    package_name: str = Field(default="", description="Base package; derived when empty")
    application_name: str = Field(default="", description="Main class name; derived when empty")
    language: str = Field(default="java")
    language_version: str = Field(default="17", description="JVM language level, e.g. '17'")
    build_system: str = Field(default="maven", description="Build system id, e.g. 'maven'")
    packaging: str = Field(default="jar")
    platform_version: str = Field(..., description="Platform (framework) version")
    dependencies: tuple[str, ...] = Field(default=(), description="Selected dependency ids")

    # -- Validation --------------------------------------------------------

    @field_validator(
        "group_id", "artifact_id", "version", "language_version", "build_system", "packaging"
    )
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("language")
    @classmethod
    def _known_language(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in LANGUAGES:
            raise ValueError(f"unsupported language '{value}' (expected one of {sorted(LANGUAGES)})")
        return value

    @field_validator("packaging")
    @classmethod
    def _known_packaging(cls, value: str) -> str:
        if value not in PACKAGINGS:
            raise ValueError(f"unsupported packaging '{value}' (expected one of {list(PACKAGINGS)})")
        return value

    @field_validator("platform_version")
    @classmethod
    def _parseable_platform_version(cls, value: str) -> str:
        if is_variable(value):
            raise ValueError(f"platform version '{value.strip()}' must be concrete, not a variable version")
        return str(Version.parse(value))

    @field_validator("dependencies")
    @classmethod
    def _dependency_ids(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        ids: list[str] = []
        for dependency_id in value:
            dependency_id = dependency_id.strip()
            if not dependency_id:
                raise ValueError("dependency ids must not be empty")
            if dependency_id not in ids:
                ids.append(dependency_id)
        return tuple(ids)

    @model_validator(mode="after")
    def _derive_names(self) -> "ProjectDescription":
        # Frozen model: derived defaults are filled in through __dict__.
        if not self.name.strip():
            self.__dict__["name"] = self.artifact_id
        if not self.package_name.strip():
            self.__dict__["package_name"] = to_package_name(f"{self.group_id}.{self.artifact_id}")
        else:
            self.__dict__["package_name"] = to_package_name(self.package_name)
        if not self.package_name:
            raise ValueError("cannot derive a valid package name")
        if not self.application_name.strip():
            self.__dict__["application_name"] = to_application_name(self.name)
        return self

    # -- Derived values ----------------------------------------------------

    @property
    def parsed_platform_version(self) -> Version:
        return Version.parse(self.platform_version)

    @property
    def source_extension(self) -> str:
        return LANGUAGES[self.language]

    @property
    def package_path(self) -> str:
        """The base package as a relative directory path (``com/example/demo``)."""
        return self.package_name.replace(".", "/")

    def has_dependency(self, dependency_id: str) -> bool:
        return dependency_id in self.dependencies
