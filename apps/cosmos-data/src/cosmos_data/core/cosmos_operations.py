"""Operation interfaces implemented by the templates."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from typing import Any

from pydantic import BaseModel

from cosmos_data.core.mapping.entity_information import CosmosEntityInformation
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.paging import CosmosPage


class CosmosOperations(ABC):
    """Abstract interface for synchronous Cosmos DB operations."""

    @abstractmethod
    def get_container_name(self, entity_class: type[BaseModel]) -> str:
        """Container name mapped to an entity class."""

    @abstractmethod
    def create_container_if_not_exists(self, entity_information: CosmosEntityInformation) -> dict[str, Any]:
        """Create the container (and database) for an entity."""

    @abstractmethod
    def delete_container(self, container_name: str) -> None:
        """Delete a container."""

    @abstractmethod
    def insert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        """Insert a new entity."""

    @abstractmethod
    def upsert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        """Insert or replace an entity."""

    @abstractmethod
    def find_by_id[T: BaseModel](
        self,
        item_id: Any,
        entity_class: type[T],
        partition_key: Any = None,
        container_name: str | None = None,
    ) -> T | None:
        """Find an entity by id."""

    @abstractmethod
    def find_by_ids[T: BaseModel](
        self, ids: Iterable[Any], entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        """Find entities by ids."""

    @abstractmethod
    def find_all[T: BaseModel](self, entity_class: type[T], container_name: str | None = None) -> list[T]:
        """Find all entities of a container."""

    @abstractmethod
    def find_all_by_partition_key[T: BaseModel](
        self, partition_key: Any, entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        """Find all entities of one logical partition."""

    @abstractmethod
    def find[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        """Find entities matching a query."""

    @abstractmethod
    def paginate_query[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> CosmosPage[T]:
        """Find one page of entities matching a query."""

    @abstractmethod
    def exists(self, query: DocumentQuery, entity_class: type[BaseModel], container_name: str | None = None) -> bool:
        """Check whether any entity matches a query."""

    @abstractmethod
    def count(
        self,
        container_name: str,
        query: DocumentQuery | None = None,
        entity_class: type[BaseModel] | None = None,
    ) -> int:
        """Count documents, optionally restricted by a query."""

    @abstractmethod
    def delete_by_id(self, container_name: str, item_id: Any, partition_key: Any) -> None:
        """Delete a document by id and partition key."""

    @abstractmethod
    def delete_entity[T: BaseModel](self, container_name: str | None, entity: T) -> None:
        """Delete an entity."""

    @abstractmethod
    def delete[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        """Delete entities matching a query and return them."""

    @abstractmethod
    def delete_all(self, container_name: str, entity_class: type[BaseModel]) -> None:
        """Delete all documents of a container."""


class ReactiveCosmosOperations(ABC):
    """Abstract interface for asynchronous Cosmos DB operations."""

    @abstractmethod
    async def create_container_if_not_exists(self, entity_information: CosmosEntityInformation) -> dict[str, Any]:
        """Create the container (and database) for an entity."""

    @abstractmethod
    async def delete_container(self, container_name: str) -> None:
        """Delete a container."""

    @abstractmethod
    async def insert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        """Insert a new entity."""

    @abstractmethod
    async def upsert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        """Insert or replace an entity."""

    @abstractmethod
    async def find_by_id[T: BaseModel](
        self,
        item_id: Any,
        entity_class: type[T],
        partition_key: Any = None,
        container_name: str | None = None,
    ) -> T | None:
        """Find an entity by id."""

    @abstractmethod
    def find_by_ids[T: BaseModel](
        self, ids: Iterable[Any], entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        """Stream entities by ids."""

    @abstractmethod
    def find_all[T: BaseModel](self, entity_class: type[T], container_name: str | None = None) -> AsyncIterator[T]:
        """Stream all entities of a container."""

    @abstractmethod
    def find_all_by_partition_key[T: BaseModel](
        self, partition_key: Any, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        """Stream all entities of one logical partition."""

    @abstractmethod
    def find[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        """Stream entities matching a query."""

    @abstractmethod
    async def paginate_query[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> CosmosPage[T]:
        """Find one page of entities matching a query."""

    @abstractmethod
    async def exists(
        self, query: DocumentQuery, entity_class: type[BaseModel], container_name: str | None = None
    ) -> bool:
        """Check whether any entity matches a query."""

    @abstractmethod
    async def count(
        self,
        container_name: str,
        query: DocumentQuery | None = None,
        entity_class: type[BaseModel] | None = None,
    ) -> int:
        """Count documents, optionally restricted by a query."""

    @abstractmethod
    async def delete_by_id(self, container_name: str, item_id: Any, partition_key: Any) -> None:
        """Delete a document by id and partition key."""

    @abstractmethod
    async def delete_entity[T: BaseModel](self, container_name: str | None, entity: T) -> None:
        """Delete an entity."""

    @abstractmethod
    def delete[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        """Delete entities matching a query, yielding each removed entity."""

    @abstractmethod
    async def delete_all(self, container_name: str, entity_class: type[BaseModel]) -> None:
        """Delete all documents of a container."""
