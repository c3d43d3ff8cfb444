"""Contributor pipeline.

A contributor adds one concern to the project being generated: a file, a
directory, or entries in the build model.  Contributors run strictly one after
the other, sorted by ``(order, registration index)``, because later ones may
depend on what earlier ones created.  The first failure aborts the pipeline;
nothing already written is rolled back.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Protocol, Sequence, TypeVar, runtime_checkable

from ..buildsystem.model import Build
from ..description import ProjectDescription
from ..metadata import MetadataProvider, has_facet
from ..utils import write_text
from .templates import TemplateRenderer

HIGHEST_PRECEDENCE = -(2**31)
LOWEST_PRECEDENCE = 2**31 - 1


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

U = TypeVar("U")


def order_of(unit: object) -> int:
    """Declared order of a contributor or customizer (``0`` when absent)."""
    return getattr(unit, "order", 0)


def sort_by_order(units: Sequence[U]) -> list[U]:
    """Sort *units* by ``(order, registration index)`` ascending."""
    indexed = sorted(enumerate(units), key=lambda pair: (order_of(pair[1]), pair[0]))
    return [unit for _, unit in indexed]


class PipelineState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"


# ---------------------------------------------------------------------------
# Contributor contract
# ---------------------------------------------------------------------------


@dataclass
class GenerationContext:
    """Everything a contributor may read or write during one generation."""

    project_root: Path
    description: ProjectDescription
    build: Build
    renderer: TemplateRenderer
    metadata: MetadataProvider

    async def write_file(self, relative: str | Path, content: str) -> Path:
        """Write *content* to *relative* under the project root."""
        return await asyncio.to_thread(write_text, self.project_root / relative, content)

    async def make_dirs(self, relative: str | Path) -> Path:
        path = self.project_root / relative
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        return path


@runtime_checkable
class ProjectContributor(Protocol):
    """A unit contributing files, directories or build entries."""

    order: int

    async def contribute(self, context: GenerationContext) -> None: ...


class ContributorPipeline:
    """Runs contributors once, in ascending ``(order, registration)`` sequence.

    States: ``PENDING`` until ``run`` is called, ``RUNNING`` with ``current``
    pointing at the contributor being invoked, then ``DONE``.  A pipeline that
    failed stays ``RUNNING`` at the failing index and cannot be re-run.
    """

    def __init__(self, contributors: Iterable[ProjectContributor] = ()) -> None:
        self._contributors: list[ProjectContributor] = list(contributors)
        self.state = PipelineState.PENDING
        self.current: int | None = None

    def register(self, contributor: ProjectContributor) -> None:
        if self.state is not PipelineState.PENDING:
            raise RuntimeError("cannot register a contributor once the pipeline has started")
        self._contributors.append(contributor)

    def ordered(self) -> list[ProjectContributor]:
        return sort_by_order(self._contributors)

    async def run(self, context: GenerationContext) -> None:
        if self.state is not PipelineState.PENDING:
            raise RuntimeError(f"contributor pipeline already {self.state.value}")
        self.state = PipelineState.RUNNING
        for index, contributor in enumerate(self.ordered()):
            self.current = index
            await contributor.contribute(context)
        self.current = None
        self.state = PipelineState.DONE

    def __len__(self) -> int:
        return len(self._contributors)


# ---------------------------------------------------------------------------
# Build model contributors
# ---------------------------------------------------------------------------


class RequestedDependenciesContributor:
    """Registers every dependency selected in the description.

    Runs first, so unknown or incompatible dependency ids fail the generation
    before any file is written.
    """

    order = HIGHEST_PRECEDENCE

    async def contribute(self, context: GenerationContext) -> None:
        platform_version = context.description.parsed_platform_version
        for dependency_id in context.description.dependencies:
            metadata = context.metadata.resolve_dependency(dependency_id, platform_version)
            context.build.add_dependency(dependency_id, metadata.to_dependency())


class WebFoldersContributor:
    """Creates the static and template resource folders of web projects."""

    order = 0
    folders = ("src/main/resources/templates", "src/main/resources/static")

    async def contribute(self, context: GenerationContext) -> None:
        if not has_facet(context.build, "web", context.metadata):
            return
        for folder in self.folders:
            await context.make_dirs(folder)
