"""Unit tests for ProjectDescription (initforge.description)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from initforge.description import ProjectDescription
from initforge.version import Version

pytestmark = pytest.mark.unit


class TestDefaults:
    def test_platform_version_required(self):
        with pytest.raises(ValidationError):
            ProjectDescription()

    def test_defaults(self):
        description = ProjectDescription(platform_version="3.4.1")
        assert description.group_id == "com.example"
        assert description.artifact_id == "demo"
        assert description.language == "java"
        assert description.build_system == "maven"
        assert description.packaging == "jar"
        assert description.dependencies == ()

    def test_derived_names(self):
        description = ProjectDescription(
            group_id="org.acme", artifact_id="billing-service", platform_version="3.4.1"
        )
        assert description.name == "billing-service"
        assert description.package_name == "org.acme.billingservice"
        assert description.application_name == "BillingServiceApplication"

    def test_explicit_names_kept(self):
        description = ProjectDescription(
            name="Billing",
            package_name="org.acme.Billing",
            application_name="BillingApp",
            platform_version="3.4.1",
        )
        assert description.name == "Billing"
        assert description.package_name == "org.acme.billing"
        assert description.application_name == "BillingApp"


class TestValidation:
    def test_blank_identifier_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDescription(group_id="  ", platform_version="3.4.1")

    def test_unknown_language_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDescription(language="scala", platform_version="3.4.1")

    def test_language_normalised(self):
        assert ProjectDescription(language="Kotlin", platform_version="3.4.1").language == "kotlin"

    def test_unknown_packaging_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDescription(packaging="ear", platform_version="3.4.1")

    def test_invalid_platform_version_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDescription(platform_version="latest")

    @pytest.mark.parametrize("platform_version", ["3.4.x", "3.x.x", "3.5.x-SNAPSHOT"])
    def test_variable_platform_version_rejected(self, platform_version):
        with pytest.raises(ValidationError, match="must be concrete"):
            ProjectDescription(platform_version=platform_version)

    def test_empty_dependency_id_rejected(self):
        with pytest.raises(ValidationError):
            ProjectDescription(platform_version="3.4.1", dependencies=("web", " "))

    def test_duplicate_dependencies_collapsed_in_order(self):
        description = ProjectDescription(
            platform_version="3.4.1", dependencies=("web", "devtools", "web")
        )
        assert description.dependencies == ("web", "devtools")

    def test_frozen(self):
        description = ProjectDescription(platform_version="3.4.1")
        with pytest.raises(ValidationError):
            description.artifact_id = "other"


class TestDerivedValues:
    def test_parsed_platform_version(self):
        description = ProjectDescription(platform_version="3.5.0-M1")
        assert description.parsed_platform_version == Version.parse("3.5.0-M1")

    @pytest.mark.parametrize(
        "language, extension", [("java", "java"), ("kotlin", "kt"), ("groovy", "groovy")]
    )
    def test_source_extension(self, language, extension):
        description = ProjectDescription(language=language, platform_version="3.4.1")
        assert description.source_extension == extension

    def test_package_path(self):
        description = ProjectDescription(platform_version="3.4.1")
        assert description.package_path == "com/example/demo"

    def test_has_dependency(self):
        description = ProjectDescription(platform_version="3.4.1", dependencies=("web",))
        assert description.has_dependency("web")
        assert not description.has_dependency("devtools")
