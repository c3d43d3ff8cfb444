"""Jinja2 template rendering for generated source and configuration files.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``initforge/scaffolder/templates/`` directory (or any configured search root)
and renders them with a project-specific context.  Output is never escaped:
generated artifacts are source and configuration files, not markup.

Parsed templates are cached by Jinja2 per renderer.  ``shared_renderer``
returns the process-wide renderer, created once on first use and shared by
concurrent generations.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader
from jinja2 import TemplateNotFound as JinjaTemplateNotFound

from ..errors import TemplateNotFound
from ..utils import to_pascal, write_text


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

TEMPLATE_SUFFIX = ".j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders named Jinja2 templates.

    A template name is a ``/``-separated path relative to the search root,
    with or without the ``.j2`` suffix (``"java/Application.java"`` resolves
    to ``java/Application.java.j2``).  ``cache_size`` bounds the number of
    parsed templates kept in memory; ``0`` disables caching.
    """

    def __init__(self, template_dir: str | Path | None = None, cache_size: int = 400) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            cache_size=cache_size,
        )
        self.env.filters["pascal_case"] = to_pascal
        self.env.filters["package_path"] = _package_path_filter

    # -- Single template rendering -----------------------------------------

    def render(self, name: str, context: dict[str, Any]) -> str:
        """Render template *name* with the provided context.

        Raises:
            TemplateNotFound: If no template resolves under the search root.
        """
        template = self.env.get_template(self.resolve(name))
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def resolve(self, name: str) -> str:
        """Return the loader name of template *name*.

        Raises:
            TemplateNotFound: If neither *name* nor *name* + ``.j2`` exists.
        """
        candidates = [name] if name.endswith(TEMPLATE_SUFFIX) else [f"{name}{TEMPLATE_SUFFIX}", name]
        for candidate in candidates:
            try:
                self.env.loader.get_source(self.env, candidate)  # type: ignore[union-attr]
            except JinjaTemplateNotFound:
                continue
            return candidate
        raise TemplateNotFound(name, str(self.template_dir))

    def exists(self, name: str) -> bool:
        try:
            self.resolve(name)
        except TemplateNotFound:
            return False
        return True

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        name: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output path.
        """
        content = self.render(name, context)
        out = Path(output_path)
        await asyncio.to_thread(write_text, out, content)
        return out

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*."""
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob(f"*{TEMPLATE_SUFFIX}")
        )


# ---------------------------------------------------------------------------
# Process-wide renderer
# ---------------------------------------------------------------------------

_shared: dict[tuple[Path, int], TemplateRenderer] = {}
_shared_lock = threading.Lock()


def shared_renderer(template_dir: str | Path | None = None, cache_size: int = 400) -> TemplateRenderer:
    """Return the process-wide renderer for *template_dir*.

    The renderer is created on first access under a lock; later calls return
    the same instance.  Jinja2 populates its template cache safely under
    concurrent reads.
    """
    key = (Path(template_dir or _DEFAULT_TEMPLATE_DIR).resolve(), cache_size)
    with _shared_lock:
        renderer = _shared.get(key)
        if renderer is None:
            renderer = TemplateRenderer(key[0], cache_size=cache_size)
            _shared[key] = renderer
        return renderer


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _package_path_filter(value: str) -> str:
    """Convert ``com.example.demo`` to ``com/example/demo``."""
    return value.replace(".", "/")
