"""Main scaffolding orchestrator.

Takes a ``ProjectDescription`` and generates a ready-to-build project
directory: contributors populate the skeleton and the build model,
customizers adjust the model, and the backend adapter of the selected build
system writes the descriptor files.  The generator itself renders nothing; it
only sequences the other components.
"""

from __future__ import annotations

import asyncio
import tempfile
import time
from pathlib import Path
from typing import Callable, Sequence

from ..buildsystem.registry import BuildSystemRegistry, default_registry
from ..config import GeneratorConfig
from ..description import ProjectDescription
from ..errors import GenerationError
from ..metadata import CatalogMetadataProvider, MetadataProvider
from ..utils import ensure_dir, format_duration, print_error, print_success, print_summary_table
from .code_gen import (
    ApplicationPropertiesContributor,
    MainSourceCodeContributor,
    ServletInitializerContributor,
    TestSourceCodeContributor,
)
from .contributors import (
    ContributorPipeline,
    GenerationContext,
    ProjectContributor,
    RequestedDependenciesContributor,
    WebFoldersContributor,
)
from .customizers import (
    AnnotationProcessorConfigurationCustomizer,
    BuildCustomizer,
    CustomizerPipeline,
    DefaultGradleBuildCustomizer,
    DefaultMavenBuildCustomizer,
    DefaultStarterCustomizer,
    DefaultTestStarterCustomizer,
    DependencyManagementCustomizer,
    GroovyDependenciesCustomizer,
    GroovyMavenBuildCustomizer,
    KotlinDependenciesCustomizer,
    KotlinJacksonCustomizer,
    PlatformRepositoriesCustomizer,
    WarPackagingWebStarterCustomizer,
    development_only_customizer,
    optional_dependency_customizer,
    project_settings_customizer,
)
from .gitignore import GitIgnoreContributor
from .templates import TemplateRenderer, shared_renderer

TargetResolver = Callable[[ProjectDescription], Path]
ContributorsFactory = Callable[[ProjectDescription], Sequence[ProjectContributor]]
CustomizersFactory = Callable[[ProjectDescription, MetadataProvider], Sequence[BuildCustomizer]]

DEVTOOLS_ID = "devtools"


# ---------------------------------------------------------------------------
# Target resolvers
# ---------------------------------------------------------------------------


def directory_resolver(base: str | Path) -> TargetResolver:
    """Resolve projects to ``<base>/<artifact_id>``."""

    def resolve(description: ProjectDescription) -> Path:
        return Path(base) / description.artifact_id

    return resolve


def temporary_directory_resolver(prefix: str = "initforge-") -> TargetResolver:
    """Resolve each project to a fresh temporary directory.

    The caller owns the directory and removes it once done with it.
    """

    def resolve(description: ProjectDescription) -> Path:
        return Path(tempfile.mkdtemp(prefix=prefix)) / description.artifact_id

    return resolve


# ---------------------------------------------------------------------------
# Standard composition
# ---------------------------------------------------------------------------


def standard_contributors(description: ProjectDescription) -> list[ProjectContributor]:
    """Contributors of a regular project; created fresh for every generation."""
    contributors: list[ProjectContributor] = [
        RequestedDependenciesContributor(),
        WebFoldersContributor(),
        MainSourceCodeContributor(),
        TestSourceCodeContributor(),
        ApplicationPropertiesContributor(),
        GitIgnoreContributor(),
    ]
    if description.packaging == "war":
        contributors.append(ServletInitializerContributor())
    return contributors


def standard_customizers(
    description: ProjectDescription, provider: MetadataProvider
) -> list[BuildCustomizer]:
    """Customizers applying to *description*.

    Customizers are only registered when the description's language, build
    system and packaging call for them.
    """
    platform_version = description.parsed_platform_version
    customizers: list[BuildCustomizer] = [
        project_settings_customizer(description),
        DefaultStarterCustomizer(provider),
        DefaultTestStarterCustomizer(provider, platform_version),
        DependencyManagementCustomizer(provider, description),
        PlatformRepositoriesCustomizer(provider, platform_version),
    ]
    if description.packaging == "war":
        customizers.append(WarPackagingWebStarterCustomizer(provider, description))
    if description.language == "kotlin":
        customizers.append(KotlinJacksonCustomizer(provider, description))
        customizers.append(KotlinDependenciesCustomizer())
    elif description.language == "groovy":
        customizers.append(GroovyDependenciesCustomizer(platform_version))

    if description.build_system == "maven":
        customizers.append(DefaultMavenBuildCustomizer(provider, description))
        if description.language == "groovy":
            customizers.append(GroovyMavenBuildCustomizer(provider, description))
        if description.has_dependency(DEVTOOLS_ID):
            customizers.append(optional_dependency_customizer(DEVTOOLS_ID))
    elif description.build_system.startswith("gradle"):
        customizers.append(DefaultGradleBuildCustomizer(provider, description))
        customizers.append(AnnotationProcessorConfigurationCustomizer())
        if description.has_dependency(DEVTOOLS_ID):
            customizers.append(development_only_customizer(DEVTOOLS_ID, platform_version))
    return customizers


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Project assembler.

    One generator may serve many generations, concurrently included: the
    registry, metadata provider and renderer are read-only, and the build
    model and both pipelines are created per call.  With ``summary`` set, a
    table describing each generated project is printed after the success line.
    """

    def __init__(
        self,
        registry: BuildSystemRegistry,
        metadata: MetadataProvider,
        renderer: TemplateRenderer | None = None,
        contributors_factory: ContributorsFactory = standard_contributors,
        customizers_factory: CustomizersFactory = standard_customizers,
        summary: bool = False,
        output_dir: str | Path = "output",
    ) -> None:
        self.registry = registry
        self.metadata = metadata
        self.renderer = renderer or shared_renderer()
        self.contributors_factory = contributors_factory
        self.customizers_factory = customizers_factory
        self.summary = summary
        self.output_dir = Path(output_dir)

    @classmethod
    def from_config(cls, config: GeneratorConfig | None = None) -> "ProjectGenerator":
        """Generator wired with the default registry, catalog and renderer of *config*."""
        config = config or GeneratorConfig()
        return cls(
            registry=default_registry(config),
            metadata=CatalogMetadataProvider.from_path(config.catalog_path),
            renderer=shared_renderer(config.template_dir, config.template_cache_size),
            output_dir=config.output_dir,
        )

    # -- Public API --------------------------------------------------------

    async def generate(
        self, description: ProjectDescription, target_resolver: TargetResolver | None = None
    ) -> Path:
        """Generate the project described by *description*.

        Args:
            description: The project to generate.
            target_resolver: Maps the description to the project directory;
                defaults to ``<output_dir>/<artifact_id>``.

        Returns:
            Path to the generated project root.

        Raises:
            UnsupportedBuildSystem: Before anything is written, if no backend
                is registered for the description's build system.
            GenerationError: Any other failure; the target directory is then
                left in an undefined state and must be discarded.
        """
        start = time.monotonic()

        # 1. Backend adapter and empty build model
        adapter = self.registry.resolve(description.build_system)
        build = adapter.create_build()

        # 2. Target directory
        resolve = target_resolver or directory_resolver(self.output_dir)
        project_root = Path(resolve(description))
        try:
            await asyncio.to_thread(ensure_dir, project_root)

            # 3. Contributors populate the skeleton and the build model
            context = GenerationContext(
                project_root=project_root,
                description=description,
                build=build,
                renderer=self.renderer,
                metadata=self.metadata,
            )
            await ContributorPipeline(self.contributors_factory(description)).run(context)

            # 4. Customizers adjust the build model
            CustomizerPipeline(self.customizers_factory(description, self.metadata)).run(build)

            # 5. Build descriptor
            written = await adapter.write(build, project_root)
        except GenerationError as exc:
            print_error(
                f"Generation of {description.artifact_id} failed after "
                f"{format_duration(time.monotonic() - start)}: {exc}"
            )
            raise

        print_success(
            f"Generated {description.artifact_id} ({adapter.id}) in "
            f"{format_duration(time.monotonic() - start)}"
        )
        if self.summary:
            print_summary_table(
                {
                    "Project": f"{description.group_id}:{description.artifact_id}",
                    "Build system": adapter.id,
                    "Platform": description.platform_version,
                    "Dependencies": ", ".join(build.list_dependency_ids()) or "-",
                    "Descriptors": ", ".join(path.name for path in written),
                    "Location": str(project_root),
                },
                title="Generated project",
            )
        return project_root
