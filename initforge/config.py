"""initforge configuration.

Centralised, typed configuration for project generation.  Settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.

A ``GeneratorConfig`` is created once at process start and treated as
read-only afterwards; every generation request shares it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class IndentConfig(BaseModel):
    """Indentation used when serialising build descriptors.

    ``maven`` and ``gradle`` override ``default`` for their content when set.
    """

    default: str = Field(default="    ")
    maven: str | None = Field(default=None)
    gradle: str | None = Field(default=None)

    def for_content(self, content_id: str) -> str:
        """Return the indent string for *content_id* (``"maven"``, ``"gradle"``...)."""
        override = getattr(self, content_id, None) if content_id in ("maven", "gradle") else None
        return override if override is not None else self.default


class GeneratorConfig(BaseModel):
    """Global initforge configuration.

    Holds the process-wide, read-only settings of the generator: where
    templates and the dependency catalog come from, how descriptors are
    indented, and where projects are generated by default.
    """

    template_dir: Path | None = Field(
        default=None,
        description="Template search root; defaults to the bundled templates",
    )
    template_cache_size: int = Field(
        default=400,
        ge=0,
        description="Number of parsed templates kept in memory (0 disables caching)",
    )
    catalog_path: Path | None = Field(
        default=None,
        description="JSON or YAML dependency catalog; defaults to the bundled catalog",
    )
    output_dir: Path = Field(
        default=Path("./output"),
        description="Parent directory of projects generated without an explicit target resolver",
    )
    indent: IndentConfig = Field(default_factory=IndentConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            INITFORGE_TEMPLATE_DIR, INITFORGE_TEMPLATE_CACHE_SIZE,
            INITFORGE_CATALOG, INITFORGE_OUTPUT_DIR, INITFORGE_INDENT,
            INITFORGE_MAVEN_INDENT, INITFORGE_GRADLE_INDENT.

        Indent values accept the literal ``\\t`` for a tab.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("INITFORGE_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["INITFORGE_TEMPLATE_DIR"])
        if os.environ.get("INITFORGE_TEMPLATE_CACHE_SIZE"):
            kwargs["template_cache_size"] = int(os.environ["INITFORGE_TEMPLATE_CACHE_SIZE"])
        if os.environ.get("INITFORGE_CATALOG"):
            kwargs["catalog_path"] = Path(os.environ["INITFORGE_CATALOG"])
        if os.environ.get("INITFORGE_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["INITFORGE_OUTPUT_DIR"])

        indent_kwargs: dict[str, Any] = {}
        for env_name, field_name in (
            ("INITFORGE_INDENT", "default"),
            ("INITFORGE_MAVEN_INDENT", "maven"),
            ("INITFORGE_GRADLE_INDENT", "gradle"),
        ):
            value = os.environ.get(env_name)
            if value:
                indent_kwargs[field_name] = value.replace("\\t", "\t")

        return cls(indent=IndentConfig(**indent_kwargs), **kwargs)
