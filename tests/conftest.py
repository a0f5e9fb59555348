"""Shared pytest fixtures for the CDK Common test suite."""

from pathlib import Path

import aws_cdk as cdk
import pytest

from cdk_common.core.context import DeploymentContext
from cdk_common.serialization.template import TemplateResolver

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"
TEMPLATES_DIR = DATA_DIR / "templates"
CONTEXT_DIR = DATA_DIR / "context"


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


@pytest.fixture()
def templates_dir() -> Path:
    """Return the root of the test template resources."""
    return TEMPLATES_DIR


@pytest.fixture()
def context_dir() -> Path:
    """Return the directory holding sample context files."""
    return CONTEXT_DIR


# ---------------------------------------------------------------------------
# Deployment context fixtures
# ---------------------------------------------------------------------------


TEST_CONTEXT: dict[str, str] = {
    "host:id": "test",
    "host:organization": "test-org",
    "host:account": "123456789012",
    "host:region": "us-east-1",
    "host:name": "test-deployment",
    "host:alias": "test",
    "host:environment": "production",
    "host:version": "v1",
    "host:domain": "example.com",
    "hosted:id": "test",
    "hosted:organization": "test-org",
    "hosted:account": "123456789012",
    "hosted:region": "us-east-1",
    "hosted:name": "test-deployment",
    "hosted:alias": "test",
    "hosted:environment": "production",
    "hosted:version": "v1",
    "hosted:domain": "example.com",
    "hosted:synthesizer:name": "test-synthesizer",
}


@pytest.fixture()
def context_values() -> dict[str, str]:
    """A full flat context with both namespaces and a synthesizer name."""
    return dict(TEST_CONTEXT)


@pytest.fixture()
def deployment_context(context_values: dict[str, str]) -> DeploymentContext:
    """The full test context as a ``DeploymentContext``."""
    return DeploymentContext.from_mapping(context_values)


@pytest.fixture()
def host_only_context() -> DeploymentContext:
    """Primary identity keys only, plus a hosted id and name."""
    primary = {key.split(":", 1)[1]: value for key, value in TEST_CONTEXT.items() if key.startswith("host:")}
    return DeploymentContext(primary=primary, secondary={"id": "hosted1", "name": "shop"})


@pytest.fixture()
def stack(context_values: dict[str, str]) -> cdk.Stack:
    """A CDK stack whose tree context carries the full test context."""
    app = cdk.App(context=context_values)
    return cdk.Stack(
        app,
        "test-stack",
        env=cdk.Environment(account="123456789012", region="us-east-1"),
    )


# ---------------------------------------------------------------------------
# Resolver fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def resolver(templates_dir: Path) -> TemplateResolver:
    """A template resolver rooted at the test template resources."""
    return TemplateResolver([templates_dir], encoding="utf-8", warn_unresolved=True)
