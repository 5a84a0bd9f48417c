"""Pytest configuration and shared fixtures for CDK tests"""
import pytest
import aws_cdk as core
import aws_cdk.assertions as assertions
from traefik_ecs.traefik_ecs_stack import TraefikEcsStack
from tests.test_constants import TEST_ENV


@pytest.fixture(scope="module")
def cdk_app():
    """Create a CDK app for testing (module-scoped for performance)"""
    return core.App()


@pytest.fixture(scope="module")
def cdk_stack(cdk_app):
    """Create the TraefikEcsStack for testing (module-scoped for performance)"""
    # VPC lookups fall back to a dummy VPC when account and region are concrete
    return TraefikEcsStack(cdk_app, "test-traefik-ecs", env=TEST_ENV)


@pytest.fixture(scope="module")
def template(cdk_stack):
    """Generate CloudFormation template from the stack (module-scoped for performance)"""
    return assertions.Template.from_stack(cdk_stack)
