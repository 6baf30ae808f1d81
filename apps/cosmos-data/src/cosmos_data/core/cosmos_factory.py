"""Cosmos DB client factory with runtime key switching."""

import logging
import threading
from typing import Any

from azure.cosmos import CosmosClient
from azure.cosmos.aio import CosmosClient as AsyncCosmosClient
from azure.identity import DefaultAzureCredential
from azure.identity.aio import DefaultAzureCredential as AsyncDefaultAzureCredential

from cosmos_data import __version__
from cosmos_data.config.cosmos_config import CosmosDbConfig
from cosmos_data.core.diagnostics import ResponseDiagnosticsProcessor, make_response_hook
from cosmos_data.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

USER_AGENT_SUFFIX = f"cosmos-data/{__version__}"


class CosmosDbFactory:
    """Builds and caches sync and async Cosmos clients for one account."""

    def __init__(
        self,
        config: CosmosDbConfig,
        response_diagnostics_processor: ResponseDiagnosticsProcessor | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            config: Connection configuration
            response_diagnostics_processor: Optional callback receiving request diagnostics
        """
        if config is None:
            raise ValueError("config must not be None")
        if not config.database:
            raise ValueError("database name must not be empty")

        self._config = config
        self._key = config.key
        self._processor = response_diagnostics_processor
        self._lock = threading.Lock()
        self._client: CosmosClient | None = None
        self._credential: DefaultAzureCredential | None = None
        self._async_client: AsyncCosmosClient | None = None
        self._async_credential: AsyncDefaultAzureCredential | None = None
        self._retired_async_clients: list[AsyncCosmosClient] = []

    @property
    def config(self) -> CosmosDbConfig:
        return self._config

    @property
    def database_name(self) -> str:
        return self._config.database

    @property
    def uses_managed_identity(self) -> bool:
        return not self._key

    def _client_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self._config.consistency_level:
            options["consistency_level"] = self._config.consistency_level
        if self._config.connection_timeout is not None:
            options["connection_timeout"] = self._config.connection_timeout
        if self._config.allow_telemetry:
            options["user_agent_suffix"] = USER_AGENT_SUFFIX
        return options

    def _require_uri(self) -> str:
        if not self._config.uri:
            raise ConfigurationError("COSMOSDB_URI is required")
        return self._config.uri

    @property
    def client(self) -> CosmosClient:
        """Synchronous client for the current credential."""
        with self._lock:
            if self._client is None:
                uri = self._require_uri()
                if self._key:
                    # Use key-based authentication
                    self._client = CosmosClient(url=uri, credential=self._key, **self._client_options())
                else:
                    # Use managed identity
                    self._credential = DefaultAzureCredential()
                    self._client = CosmosClient(url=uri, credential=self._credential, **self._client_options())
                logger.info("Created Cosmos client for %s", uri)
            return self._client

    @property
    def async_client(self) -> AsyncCosmosClient:
        """Asynchronous client for the current credential."""
        with self._lock:
            if self._async_client is None:
                uri = self._require_uri()
                if self._key:
                    credential: Any = self._key
                else:
                    self._async_credential = AsyncDefaultAzureCredential()
                    credential = self._async_credential
                self._async_client = AsyncCosmosClient(url=uri, credential=credential, **self._client_options())
                logger.info("Created async Cosmos client for %s", uri)
            return self._async_client

    def request_kwargs(self) -> dict[str, Any]:
        """Per-request SDK options derived from configuration."""
        kwargs: dict[str, Any] = {}
        if self._processor is not None:
            kwargs["response_hook"] = make_response_hook(self._processor)
        return kwargs

    def query_kwargs(self) -> dict[str, Any]:
        """SDK options applied to every query."""
        kwargs = self.request_kwargs()
        if self._config.populate_query_metrics:
            kwargs["populate_query_metrics"] = True
        if self._config.max_item_count is not None:
            kwargs["max_item_count"] = self._config.max_item_count
        return kwargs

    def switch_key(self, key: str) -> None:
        """Use ``key`` for all subsequent requests.

        The synchronous client is closed, both clients are rebuilt lazily.
        """
        if not key:
            raise ConfigurationError("key must not be empty")
        with self._lock:
            self._key = key
            self._close_client()
            if self._async_client is not None:
                # Requests may still be in flight on the old client; closed by aclose()
                self._retired_async_clients.append(self._async_client)
                self._async_client = None
        logger.info("Switched Cosmos DB credential key")

    def switch_to_primary_key(self) -> None:
        if not self._config.key:
            raise ConfigurationError("Primary key is not configured")
        self.switch_key(self._config.key)

    def switch_to_secondary_key(self) -> None:
        if not self._config.secondary_key:
            raise ConfigurationError("Secondary key is not configured")
        self.switch_key(self._config.secondary_key)

    def _close_client(self) -> None:
        # Caller holds the lock
        client, self._client = self._client, None
        credential, self._credential = self._credential, None
        if client is not None:
            client.close()
        if credential is not None:
            credential.close()

    def close(self) -> None:
        """Close the cached synchronous client and credential."""
        with self._lock:
            self._close_client()

    async def aclose(self) -> None:
        """Close the cached asynchronous client and credential."""
        with self._lock:
            clients = [*self._retired_async_clients, self._async_client]
            self._retired_async_clients = []
            self._async_client = None
            credential, self._async_credential = self._async_credential, None
        for client in clients:
            if client is not None:
                await client.close()
        if credential is not None:
            await credential.close()
