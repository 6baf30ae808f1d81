"""Pytest configuration and fixtures for the sample API."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from cosmos_data import CosmosDbConfig, CosmosDbFactory, get_cosmos_config
from cosmos_sample.main import app
from cosmos_sample.services import get_cosmos_factory, get_user_repository


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests without external services")


@pytest.fixture
def user_repository() -> MagicMock:
    """Repository double; derived query methods resolve as plain mock attributes."""
    return MagicMock()


@pytest.fixture
def cosmos_factory() -> MagicMock:
    return MagicMock(spec=CosmosDbFactory)


@pytest.fixture
def client(user_repository: MagicMock, cosmos_factory: MagicMock) -> TestClient:
    """Create a FastAPI test client with Cosmos DB services replaced."""
    app.dependency_overrides[get_user_repository] = lambda: user_repository
    app.dependency_overrides[get_cosmos_factory] = lambda: cosmos_factory
    app.dependency_overrides[get_cosmos_config] = lambda: CosmosDbConfig(
        _env_file=None, uri="https://localhost:8081/", database="sampledb"
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
