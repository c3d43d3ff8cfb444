"""Import checks for the public initforge packages."""

from __future__ import annotations

import importlib

import pytest

pytestmark = pytest.mark.unit

MODULES = [
    "initforge",
    "initforge.config",
    "initforge.errors",
    "initforge.utils",
    "initforge.version",
    "initforge.description",
    "initforge.metadata",
    "initforge.buildsystem",
    "initforge.buildsystem.model",
    "initforge.buildsystem.writer",
    "initforge.buildsystem.base",
    "initforge.buildsystem.maven",
    "initforge.buildsystem.gradle",
    "initforge.buildsystem.registry",
    "initforge.scaffolder",
    "initforge.scaffolder.templates",
    "initforge.scaffolder.contributors",
    "initforge.scaffolder.code_gen",
    "initforge.scaffolder.gitignore",
    "initforge.scaffolder.customizers",
    "initforge.scaffolder.generator",
]


class TestImports:
    @pytest.mark.parametrize("name", MODULES)
    def test_module_imports(self, name):
        assert importlib.import_module(name) is not None

    @pytest.mark.parametrize("package", ["initforge", "initforge.buildsystem", "initforge.scaffolder"])
    def test_exports_resolve(self, package):
        module = importlib.import_module(package)
        for name in module.__all__:
            assert hasattr(module, name), f"{package}.{name}"

    def test_version_reference_flag_is_a_property(self):
        from initforge.buildsystem.model import VersionReference

        assert isinstance(VersionReference.__dict__["is_property"], property)
        assert VersionReference.of_property("acme.version").property_name == "acme.version"
