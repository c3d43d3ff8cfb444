"""Exception hierarchy for project generation.

Every failure the generation core can raise derives from ``GenerationError``
so callers can treat a failed generation uniformly (discard the target
directory) while still branching on the concrete kind when they need to.
Filesystem errors are never wrapped; they propagate as ``OSError``.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for every error raised by the generation core."""


class UnsupportedBuildSystem(GenerationError):
    """No backend adapter is registered for the requested build system."""

    def __init__(self, build_system: str, available: list[str] | None = None) -> None:
        self.build_system = build_system
        self.available = list(available or [])
        message = f"Unsupported build system '{build_system}'"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class UnknownDependency(GenerationError):
    """A dependency id could not be resolved by the metadata provider."""

    def __init__(self, dependency_id: str) -> None:
        self.dependency_id = dependency_id
        super().__init__(f"Unknown dependency '{dependency_id}'")


class UnknownPlugin(GenerationError):
    """A plugin id could not be resolved by the metadata provider."""

    def __init__(self, plugin_id: str) -> None:
        self.plugin_id = plugin_id
        super().__init__(f"Unknown plugin '{plugin_id}'")


class IncompatibleDependency(GenerationError):
    """A dependency is not available for the requested platform version."""

    def __init__(self, dependency_id: str, platform_version: str, compatibility_range: str) -> None:
        self.dependency_id = dependency_id
        self.platform_version = platform_version
        self.compatibility_range = compatibility_range
        super().__init__(
            f"Dependency '{dependency_id}' is not compatible with platform "
            f"{platform_version} (requires {compatibility_range})"
        )


class TemplateNotFound(GenerationError):
    """The template renderer could not resolve a template name."""

    def __init__(self, name: str, search_root: str | None = None) -> None:
        self.name = name
        self.search_root = search_root
        message = f"Template not found: '{name}'"
        if search_root:
            message += f" (searched in {search_root})"
        super().__init__(message)


class ConflictingDefinition(GenerationError):
    """The same build item id was registered with a different identity."""

    kind = "build item"

    def __init__(self, item_id: str, existing: object, requested: object) -> None:
        self.item_id = item_id
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Conflicting {self.kind} definition for '{item_id}': "
            f"{existing} is already registered, got {requested}"
        )


class ConflictingDependencyDefinition(ConflictingDefinition):
    kind = "dependency"


class ConflictingPluginDefinition(ConflictingDefinition):
    kind = "plugin"


class ConflictingRepositoryDefinition(ConflictingDefinition):
    kind = "repository"


class BuildValidationError(GenerationError):
    """A backend adapter rejected the build model."""

    def __init__(self, build_system: str, problems: list[str]) -> None:
        self.build_system = build_system
        self.problems = list(problems)
        details = "; ".join(self.problems)
        super().__init__(f"Invalid {build_system} build: {details}")


class InvalidVersionError(GenerationError, ValueError):
    """A version or version range string does not follow the version scheme."""

    def __init__(self, text: str, reason: str = "") -> None:
        self.text = text
        message = f"Invalid version '{text}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
