"""Line-oriented writer used by the build descriptor serializers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class IndentingWriter:
    """Accumulates text lines, prefixing each with the current indentation.

    Empty lines are written without indentation so that output never carries
    trailing whitespace.
    """

    def __init__(self, indent: str = "    ") -> None:
        self.indent = indent
        self._level = 0
        self._lines: list[str] = []

    def println(self, text: str = "") -> None:
        if text:
            self._lines.append(f"{self.indent * self._level}{text}")
        else:
            self._lines.append("")

    def println_all(self, lines: list[str]) -> None:
        for line in lines:
            self.println(line)

    @contextmanager
    def indented(self) -> Iterator["IndentingWriter"]:
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1

    @contextmanager
    def block(self, opening: str, closing: str = "}") -> Iterator["IndentingWriter"]:
        """Write *opening*, indent the body, then write *closing*."""
        self.println(opening)
        with self.indented():
            yield self
        self.println(closing)

    def getvalue(self) -> str:
        """Return the accumulated text, always terminated by a newline."""
        return "\n".join(self._lines) + "\n" if self._lines else ""
