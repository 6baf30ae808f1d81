"""Connection configuration for Cosmos DB."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_env_file_path() -> str:
    """Get the path to the .env file.

    Checks for ENV_FILE environment variable first, then defaults to
    .env in the cosmos-data project directory (apps/cosmos-data/.env).

    Returns:
        Path to the .env file
    """
    env_file = os.getenv("ENV_FILE")
    if env_file:
        return env_file

    # apps/cosmos-data/src/cosmos_data/config/cosmos_config.py -> apps/cosmos-data/
    current_file = Path(__file__)
    project_dir = current_file.parent.parent.parent.parent
    return str(project_dir / ".env")


class CosmosDbConfig(BaseSettings):
    """Cosmos DB account settings from COSMOSDB_* environment variables."""

    uri: str | None = None
    key: str | None = None
    secondary_key: str | None = None
    database: str = "cosmosdata"

    # Client options
    consistency_level: str | None = None
    connection_timeout: int | None = None
    allow_telemetry: bool = True

    # Query options
    populate_query_metrics: bool = False
    max_item_count: int | None = None

    auto_create_database: bool = True

    model_config = SettingsConfigDict(
        env_file=_get_env_file_path(),
        case_sensitive=False,
        env_file_encoding="utf-8",
        env_prefix="COSMOSDB_",
        extra="ignore",
    )


def get_cosmos_config() -> CosmosDbConfig:
    """Get Cosmos DB configuration.

    Returns:
        CosmosDbConfig instance
    """
    return CosmosDbConfig()
