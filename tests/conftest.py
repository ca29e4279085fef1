"""Shared fixtures for tests."""

import json
from pathlib import Path

import pytest

from openapi_mcp_server.discovery.openapi_parser import ProviderBundle

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SPECS_DIR = FIXTURES_DIR / "specs"


@pytest.fixture
def specs_dir() -> Path:
    """Offline provider directories (petstore, weather, noserver, empty)."""
    return SPECS_DIR


@pytest.fixture
def petstore_spec() -> dict:
    """Load the offline petstore OpenAPI document."""
    with open(SPECS_DIR / "petstore" / "specification.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_bundle(petstore_spec) -> ProviderBundle:
    return ProviderBundle(
        name="petstore",
        document=petstore_spec,
        headers={"Authorization": "Bearer test-token"},
    )
