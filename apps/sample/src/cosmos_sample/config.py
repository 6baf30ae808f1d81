"""Configuration management for the Cosmos sample API."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_env_file_path() -> str:
    """Get the path to the .env file.

    Checks for ENV_FILE environment variable first, then defaults to
    .env in the sample project directory (apps/sample/.env).

    Returns:
        Path to the .env file
    """
    env_file = os.getenv("ENV_FILE")
    if env_file:
        return env_file

    # This file is in apps/sample/src/cosmos_sample/config.py
    # So we go up 3 levels to get to apps/sample/
    current_file = Path(__file__)
    sample_dir = current_file.parent.parent.parent
    return str(sample_dir / ".env")


class Settings(BaseSettings):
    """Application settings from environment variables.

    Cosmos DB connection settings live in ``cosmos_data.CosmosDbConfig``
    (``COSMOSDB_*`` variables).
    """

    # Application
    app_name: str = "cosmos-sample"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "info"

    # API
    api_host: str = "localhost"
    api_port: int = 8000

    model_config = SettingsConfigDict(
        env_file=_get_env_file_path(),
        case_sensitive=False,
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
