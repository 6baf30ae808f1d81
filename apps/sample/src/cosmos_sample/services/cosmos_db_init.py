"""Cosmos DB initialization service."""

import logging

from pydantic import BaseModel

from cosmos_data import CosmosDbConfig, CosmosDbFactory, CosmosTemplate, MappingCosmosConverter
from cosmos_data.core.mapping import get_entity_information
from cosmos_data.exceptions import CosmosDataError
from cosmos_sample.config import Settings
from cosmos_sample.models.user import User

logger = logging.getLogger(__name__)

# Entities whose containers are created at startup
ENTITY_CLASSES: tuple[type[BaseModel], ...] = (User,)


class CosmosDbInitializer:
    """Initialize Cosmos DB database and containers if they don't exist."""

    def __init__(self, config: CosmosDbConfig, template: CosmosTemplate | None = None):
        """Initialize the initializer.

        Args:
            config: Cosmos DB configuration
            template: Template used to create containers. If None, one is built from config.
        """
        self.config = config
        self.template = template
        self._factory: CosmosDbFactory | None = None

    def connect(self) -> None:
        """Build the template when none was supplied."""
        if not self.config.uri:
            logger.warning("Cosmos DB endpoint not configured. Skipping initialization.")
            return

        if self.template is None:
            self._factory = CosmosDbFactory(self.config)
            self.template = CosmosTemplate(self._factory, MappingCosmosConverter())
        logger.info("Connected to Cosmos DB at %s", self.config.uri)

    def initialize_containers(self) -> None:
        """Create the database and one container per entity."""
        if self.template is None:
            return

        for entity_class in ENTITY_CLASSES:
            info = get_entity_information(entity_class)
            try:
                self.template.create_container_if_not_exists(info)
            except CosmosDataError as e:
                logger.error("Failed to create container '%s': %s", info.container_name, e)
                raise

    def initialize(self) -> None:
        """Run full initialization: connect, create database and containers."""
        self.connect()
        self.initialize_containers()
        logger.info("Cosmos DB initialization completed successfully")

    def close(self) -> None:
        """Close the client built by connect(). A supplied template is left open."""
        if self._factory is None:
            return
        self._factory.close()
        self._factory = None
        self.template = None


async def initialize_cosmos_db(settings: Settings, config: CosmosDbConfig) -> None:
    """Initialize Cosmos DB during application startup.

    Args:
        settings: Application settings
        config: Cosmos DB configuration
    """
    initializer = CosmosDbInitializer(config)
    try:
        initializer.initialize()
    except CosmosDataError as e:
        logger.error("Failed to initialize Cosmos DB: %s", e)
        if settings.environment == "production":
            raise
        # In development, log warning but allow app to continue
        logger.warning("Continuing without Cosmos DB initialization (development mode)")
    finally:
        initializer.close()
