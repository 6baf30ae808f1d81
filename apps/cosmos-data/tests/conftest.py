"""Pytest configuration and fixtures for cosmos-data tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cosmos_data import CosmosDbConfig, CosmosDbFactory, CosmosTemplate, MappingCosmosConverter, ReactiveCosmosTemplate


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "integration: marks tests as integration tests against a live Cosmos DB account")


@pytest.fixture
def cosmos_config() -> CosmosDbConfig:
    """Configuration that ignores any local .env file."""
    return CosmosDbConfig(
        _env_file=None,
        uri="https://localhost:8081/",
        key="cHJpbWFyeQ==",
        secondary_key="c2Vjb25kYXJ5",
        database="testdb",
    )


@pytest.fixture
def converter() -> MappingCosmosConverter:
    return MappingCosmosConverter()


@pytest.fixture
def factory(cosmos_config: CosmosDbConfig) -> MagicMock:
    """Factory double returning fresh option dicts on every call."""
    factory = MagicMock(spec=CosmosDbFactory)
    factory.config = cosmos_config
    factory.database_name = cosmos_config.database
    factory.request_kwargs.side_effect = lambda: {}
    factory.query_kwargs.side_effect = lambda: {}
    return factory


@pytest.fixture
def container(factory: MagicMock) -> MagicMock:
    """Sync container proxy returned for every container name."""
    container = MagicMock()
    factory.client.get_database_client.return_value.get_container_client.return_value = container
    return container


@pytest.fixture
def template(factory: MagicMock, converter: MappingCosmosConverter) -> CosmosTemplate:
    return CosmosTemplate(factory, converter)


@pytest.fixture
def async_container(factory: MagicMock) -> MagicMock:
    """Async container proxy with awaitable point operations."""
    container = MagicMock()
    container.create_item = AsyncMock()
    container.upsert_item = AsyncMock()
    container.read_item = AsyncMock()
    container.delete_item = AsyncMock()
    factory.async_client.get_database_client.return_value.get_container_client.return_value = container
    return container


@pytest.fixture
def reactive_template(factory: MagicMock, converter: MappingCosmosConverter) -> ReactiveCosmosTemplate:
    return ReactiveCosmosTemplate(factory, converter)
