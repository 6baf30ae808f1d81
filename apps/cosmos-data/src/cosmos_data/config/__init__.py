"""Configuration package."""

from cosmos_data.config.cosmos_config import CosmosDbConfig, get_cosmos_config

__all__ = ["CosmosDbConfig", "get_cosmos_config"]
