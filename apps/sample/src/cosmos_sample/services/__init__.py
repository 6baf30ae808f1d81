"""Service initialization and dependency injection."""

import logging
from typing import Any

from fastapi import Depends

from cosmos_data import CosmosDbConfig, CosmosDbFactory, CosmosTemplate, MappingCosmosConverter, get_cosmos_config
from cosmos_data.exceptions import ConfigurationError
from cosmos_sample.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Service instances cache
_services_cache: dict[str, Any] = {}


def get_cosmos_factory(config: CosmosDbConfig = Depends(get_cosmos_config)) -> CosmosDbFactory:
    """Get the Cosmos DB client factory.

    Args:
        config: Cosmos DB configuration

    Returns:
        CosmosDbFactory instance shared by all requests
    """
    if "factory" not in _services_cache:
        if not config.uri:
            raise ConfigurationError("COSMOSDB_URI is required")

        _services_cache["factory"] = CosmosDbFactory(config)
        logger.info(
            "Initialized CosmosDbFactory (managed identity: %s)", _services_cache["factory"].uses_managed_identity
        )

    return _services_cache["factory"]


def get_cosmos_template(factory: CosmosDbFactory = Depends(get_cosmos_factory)) -> CosmosTemplate:
    """Get the Cosmos DB template.

    Args:
        factory: Client factory

    Returns:
        CosmosTemplate instance
    """
    if "template" not in _services_cache:
        _services_cache["template"] = CosmosTemplate(factory, MappingCosmosConverter())
        logger.info("Initialized CosmosTemplate for database %s", factory.database_name)

    return _services_cache["template"]


def get_user_repository(template: CosmosTemplate = Depends(get_cosmos_template)) -> UserRepository:
    """Get the user repository.

    Args:
        template: Cosmos DB template

    Returns:
        UserRepository instance
    """
    if "user_repository" not in _services_cache:
        _services_cache["user_repository"] = UserRepository(template)
        logger.info("Initialized UserRepository")

    return _services_cache["user_repository"]


async def close_services() -> None:
    """Release cached clients and forget all service instances."""
    factory = _services_cache.get("factory")
    if factory is not None:
        factory.close()
        await factory.aclose()
    _services_cache.clear()
    logger.info("Closed Cosmos DB services")
