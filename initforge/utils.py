"""Shared utility functions for initforge.

Provides Rich-based console reporting, name helpers used to derive package
and class names from project coordinates, and small file-system helpers.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.console import Console
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def to_pascal(name: str) -> str:
    """Convert ``some-thing``, ``some_thing`` or ``some thing`` to ``SomeThing``."""
    parts = re.split(r"[-_.\s]+", name)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def to_package_name(text: str) -> str:
    """Derive a valid JVM package name from a group/artifact string.

    Each dot-separated segment is lowercased, stripped of characters that are
    not legal in identifiers, and prefixed with ``_`` if it starts with a
    digit.

    Examples::

        to_package_name("com.example.my-app") -> "com.example.myapp"
        to_package_name("org.acme.2fa") -> "org.acme._2fa"
    """
    segments = []
    for raw in text.split("."):
        segment = re.sub(r"[^a-z0-9_]", "", raw.lower())
        if not segment:
            continue
        if segment[0].isdigit():
            segment = f"_{segment}"
        segments.append(segment)
    return ".".join(segments)


def to_application_name(name: str) -> str:
    """Derive the main application class name from a project name.

    Examples::

        to_application_name("demo") -> "DemoApplication"
        to_application_name("my-service") -> "MyServiceApplication"
        to_application_name("42") -> "Application"
    """
    candidate = re.sub(r"[^A-Za-z0-9]", "", to_pascal(name))
    candidate = candidate.lstrip("0123456789")
    if not candidate:
        return "Application"
    if candidate.endswith("Application"):
        return candidate
    return f"{candidate}Application"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def write_text(path: Path, content: str) -> Path:
    """Synchronous helper: create parent dirs and write *content*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
