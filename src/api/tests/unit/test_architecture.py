"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the Provisioning bounded context.
"""

from pytest_archon import archrule


class TestProvisioningDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_outer_layers(self):
        """Domain layer should only depend on itself.

        Lifecycle rules must be testable without services, adapters or
        entry points.
        """
        (
            archrule("domain_no_outer_layers")
            .match("provisioning.domain*")
            .should_not_import(
                "provisioning.application*",
                "provisioning.infrastructure*",
                "provisioning.presentation*",
                "provisioning.ports*",
            )
            .check("provisioning")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("domain_no_frameworks")
            .match("provisioning.domain*")
            .should_not_import(
                "fastapi*", "starlette*", "sqlalchemy*", "boto3*", "botocore*"
            )
            .check("provisioning")
        )


class TestProvisioningPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_implementations(self):
        """Ports define interfaces; they should not know their adapters."""
        (
            archrule("ports_no_implementations")
            .match("provisioning.ports*")
            .should_not_import(
                "provisioning.application*",
                "provisioning.infrastructure*",
                "boto3*",
                "botocore*",
                "sqlalchemy*",
            )
            .check("provisioning")
        )


class TestProvisioningApplicationLayerBoundaries:
    """Tests that the application layer depends on ports, not adapters."""

    def test_application_does_not_import_infrastructure(self):
        """Workers reach the registry and the cloud only through ports."""
        (
            archrule("application_no_infrastructure")
            .match("provisioning.application*")
            .should_not_import(
                "provisioning.infrastructure*",
                "provisioning.presentation*",
                "infrastructure*",
            )
            .check("provisioning")
        )

    def test_application_does_not_import_sdks(self):
        """Workers should not call cloud SDKs or the database directly."""
        (
            archrule("application_no_sdks")
            .match("provisioning.application*")
            .should_not_import("boto3*", "botocore*", "sqlalchemy*", "fastapi*")
            .check("provisioning")
        )


class TestProvisioningInfrastructureLayerBoundaries:
    def test_infrastructure_does_not_import_presentation(self):
        """Adapters should not depend on entry points."""
        (
            archrule("infrastructure_no_presentation")
            .match("provisioning.infrastructure*")
            .should_not_import("provisioning.presentation*")
            .check("provisioning")
        )
