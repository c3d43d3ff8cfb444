"""Contract shared by every build system backend."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from ..errors import BuildValidationError
from ..utils import write_text
from .model import Build


class BuildSystemAdapter(ABC):
    """Translates a ``Build`` into one build tool's descriptor files.

    Subclasses declare the build system ``id`` they answer to and the
    ``content_id`` used to look up their indentation.  ``serialize`` is pure
    and deterministic: the same model always yields byte-identical text.
    """

    id: ClassVar[str]
    content_id: ClassVar[str]

    def __init__(self, indent: str = "    ") -> None:
        self.indent = indent

    def supports(self, build_system: str) -> bool:
        return build_system == self.id

    @property
    @abstractmethod
    def descriptor_files(self) -> tuple[str, ...]:
        """Relative paths of the files ``serialize`` produces."""

    @abstractmethod
    def create_build(self) -> Build:
        """Return an empty model of the flavour this backend understands."""

    @abstractmethod
    def problems(self, build: Build) -> list[str]:
        """Return every backend constraint *build* violates."""

    @abstractmethod
    def render(self, build: Build) -> dict[str, str]:
        """Render an already validated *build* to ``{relative path: text}``."""

    def validate(self, build: Build) -> None:
        """Raise ``BuildValidationError`` if *build* cannot be serialized."""
        problems = self.problems(build)
        if problems:
            raise BuildValidationError(self.id, problems)

    def serialize(self, build: Build) -> dict[str, str]:
        """Validate then render *build*."""
        self.validate(build)
        return self.render(build)

    async def write(self, build: Build, project_root: Path) -> list[Path]:
        """Serialize *build* and write the descriptor files under *project_root*."""
        written: list[Path] = []
        for relative, content in self.serialize(build).items():
            path = await asyncio.to_thread(write_text, Path(project_root) / relative, content)
            written.append(path)
        return written

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
