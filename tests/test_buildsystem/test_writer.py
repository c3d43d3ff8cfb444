"""Tests for IndentingWriter (initforge.buildsystem.writer)."""

from __future__ import annotations

import pytest

from initforge.buildsystem.writer import IndentingWriter

pytestmark = pytest.mark.unit


class TestIndentingWriter:
    def test_empty(self):
        assert IndentingWriter().getvalue() == ""

    def test_lines_end_with_newline(self):
        writer = IndentingWriter()
        writer.println("a")
        writer.println("b")
        assert writer.getvalue() == "a\nb\n"

    def test_block_indents_body(self):
        writer = IndentingWriter("  ")
        with writer.block("plugins {"):
            writer.println("id 'java'")
        assert writer.getvalue() == "plugins {\n  id 'java'\n}\n"

    def test_nested_blocks(self):
        writer = IndentingWriter("\t")
        with writer.block("<a>", "</a>"):
            with writer.block("<b>", "</b>"):
                writer.println("text")
        assert writer.getvalue() == "<a>\n\t<b>\n\t\ttext\n\t</b>\n</a>\n"

    def test_blank_lines_carry_no_indent(self):
        writer = IndentingWriter()
        with writer.indented():
            writer.println("x")
            writer.println()
            writer.println("y")
        assert writer.getvalue() == "    x\n\n    y\n"

    def test_indent_restored_after_error(self):
        writer = IndentingWriter()
        with pytest.raises(RuntimeError):
            with writer.indented():
                raise RuntimeError("boom")
        writer.println("top")
        assert writer.getvalue() == "top\n"

    def test_println_all(self):
        writer = IndentingWriter()
        writer.println_all(["a", "", "b"])
        assert writer.getvalue() == "a\n\nb\n"
