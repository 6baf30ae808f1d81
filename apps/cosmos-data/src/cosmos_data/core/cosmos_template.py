"""Synchronous template mapping entities onto Cosmos DB containers."""

import logging
from collections.abc import Iterable
from typing import Any

from azure.cosmos import ContainerProxy, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from pydantic import BaseModel

from cosmos_data.core.cosmos_operations import CosmosOperations
from cosmos_data.core.generator.query_generator import SqlQuerySpec
from cosmos_data.core.mapping.entity_information import CosmosEntityInformation
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.paging import CosmosPage, PageRequest
from cosmos_data.core.template_support import CosmosTemplateSupport
from cosmos_data.exceptions import DatabaseCreationError

logger = logging.getLogger(__name__)


class CosmosTemplate(CosmosTemplateSupport, CosmosOperations):
    """Cosmos DB implementation of CosmosOperations on the synchronous SDK."""

    def _database(self) -> DatabaseProxy:
        return self.factory.client.get_database_client(self.database_name)

    def _container(self, container_name: str) -> ContainerProxy:
        return self._database().get_container_client(container_name)

    def _query_documents(
        self, container_name: str, spec: SqlQuerySpec, partition_key: Any = None
    ) -> list[dict[str, Any]]:
        kwargs = self.factory.query_kwargs()
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        else:
            kwargs["enable_cross_partition_query"] = True
        items = self._container(container_name).query_items(
            query=spec.query_text, parameters=spec.parameters, **kwargs
        )
        documents = list(items)
        logger.debug("Queried %d documents from container %s", len(documents), container_name)
        return documents

    # ========================================================================
    # Containers
    # ========================================================================

    def create_container_if_not_exists(self, entity_information: CosmosEntityInformation) -> dict[str, Any]:
        """Create the database and container for an entity if missing.

        Args:
            entity_information: Mapping information of the entity

        Returns:
            Container properties

        Raises:
            DatabaseCreationError: If the database or container cannot be created
        """
        container_name = entity_information.container_name
        try:
            client = self.factory.client
            if self.factory.config.auto_create_database:
                database = client.create_database_if_not_exists(id=self.database_name)
            else:
                database = client.get_database_client(self.database_name)
            container = database.create_container_if_not_exists(
                id=container_name, **self._container_options(entity_information)
            )
            logger.info(
                "Container '%s' initialized with partition key '%s'",
                container_name,
                entity_information.partition_key_path,
            )
            return container.read(**self.factory.request_kwargs())
        except CosmosHttpResponseError as e:
            logger.error("Failed to create container '%s': %s", container_name, e)
            raise DatabaseCreationError(f"Failed to create container '{container_name}': {e.message}") from e

    def delete_container(self, container_name: str) -> None:
        try:
            self._database().delete_container(container_name, **self.factory.request_kwargs())
            logger.info("Deleted container %s", container_name)
        except CosmosResourceNotFoundError:
            logger.warning("Container %s not found for deletion", container_name)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to delete container {container_name}") from e

    # ========================================================================
    # Writes
    # ========================================================================

    def insert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        """Insert an entity.

        Args:
            entity: Entity to insert
            container_name: Container name. If None, uses the entity's container.

        Returns:
            Inserted entity as stored (generated id and etag populated)

        Raises:
            DocumentAlreadyExistsError: If a document with the same id exists in the partition
        """
        entity_class = type(entity)
        container_name = self._container_name(entity_class, container_name)
        document = self.converter.write(entity)
        document.pop("_etag", None)
        try:
            created = self._container(container_name).create_item(body=document, **self.factory.request_kwargs())
            logger.info("Created item %s in container %s", created["id"], container_name)
            return self.converter.read(entity_class, created)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to insert item {document.get('id')} into {container_name}") from e

    def upsert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        """Insert or replace an entity.

        Versioned entities are only replaced when their etag still matches.

        Raises:
            OptimisticLockingError: If the stored document changed since it was read
        """
        entity_class = type(entity)
        container_name = self._container_name(entity_class, container_name)
        document = self.converter.write(entity)
        # The etag travels as a request condition, not in the body
        document.pop("_etag", None)
        try:
            upserted = self._container(container_name).upsert_item(body=document, **self._write_options(entity))
            logger.info("Upserted item %s in container %s", upserted["id"], container_name)
            return self.converter.read(entity_class, upserted)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to upsert item {document.get('id')} into {container_name}") from e

    # ========================================================================
    # Reads
    # ========================================================================

    def find_by_id[T: BaseModel](
        self,
        item_id: Any,
        entity_class: type[T],
        partition_key: Any = None,
        container_name: str | None = None,
    ) -> T | None:
        """Find an entity by id.

        Args:
            item_id: Entity id
            entity_class: Entity class
            partition_key: Partition key value. If None and the container is not
                partitioned by id, a cross-partition query is issued.
            container_name: Container name. If None, uses the entity's container.

        Returns:
            Entity if found, None otherwise
        """
        if item_id is None:
            raise ValueError("item_id must not be None")

        info = self.entity_information(entity_class)
        container_name = self._container_name(entity_class, container_name)
        item_id = str(item_id)

        if partition_key is None and info.partition_key_field is None:
            partition_key = item_id

        try:
            if partition_key is not None:
                document = self._container(container_name).read_item(
                    item=item_id,
                    partition_key=self.converter.to_document_value(partition_key),
                    **self.factory.request_kwargs(),
                )
            else:
                spec = self.query_generator.generate_find_by_ids([item_id])
                documents = self._query_documents(container_name, spec)
                document = documents[0] if documents else None
        except CosmosResourceNotFoundError:
            document = None
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to read item {item_id} from {container_name}") from e

        if document is None:
            logger.debug("Item %s not found in container %s", item_id, container_name)
        return self.converter.read(entity_class, document)

    def find_by_ids[T: BaseModel](
        self, ids: Iterable[Any], entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        container_name = self._container_name(entity_class, container_name)
        spec = self.query_generator.generate_find_by_ids(ids)
        try:
            documents = self._query_documents(container_name, spec)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to query items by id from {container_name}") from e
        return [self.converter.read(entity_class, document) for document in documents]

    def find_all[T: BaseModel](self, entity_class: type[T], container_name: str | None = None) -> list[T]:
        return self.find(DocumentQuery(), entity_class, container_name)

    def find_all_by_partition_key[T: BaseModel](
        self, partition_key: Any, entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        if partition_key is None:
            raise ValueError("partition_key must not be None")
        container_name = self._container_name(entity_class, container_name)
        info = self.entity_information(entity_class)
        spec, _ = self._prepare_query(DocumentQuery(), info)
        try:
            documents = self._query_documents(
                container_name, spec, partition_key=self.converter.to_document_value(partition_key)
            )
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to query partition {partition_key} of {container_name}") from e
        return [self.converter.read(entity_class, document) for document in documents]

    def _find_documents(
        self, query: DocumentQuery, entity_class: type[BaseModel], container_name: str
    ) -> list[dict[str, Any]]:
        spec, partition_key = self._prepare_query(query, self.entity_information(entity_class))
        try:
            return self._query_documents(container_name, spec, partition_key)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to query items from {container_name}") from e

    def find[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        """Find entities matching a query.

        Queries pinning the partition key run against that partition only;
        all others run cross-partition.
        """
        container_name = self._container_name(entity_class, container_name)
        documents = self._find_documents(query, entity_class, container_name)
        return [self.converter.read(entity_class, document) for document in documents]

    def paginate_query[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> CosmosPage[T]:
        """Find one page of entities.

        Args:
            query: Query carrying a pageable. Without one the first page of 20 is read.
            entity_class: Entity class
            container_name: Container name. If None, uses the entity's container.

        Returns:
            Page of entities with the continuation token of the next page
        """
        pageable = query.pageable or PageRequest()
        query = query.with_pageable(pageable) if query.pageable is None else query
        container_name = self._container_name(entity_class, container_name)
        spec, partition_key = self._prepare_query(query, self.entity_information(entity_class))

        kwargs = self.factory.query_kwargs()
        kwargs["max_item_count"] = pageable.size
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        else:
            kwargs["enable_cross_partition_query"] = True

        try:
            pager = (
                self._container(container_name)
                .query_items(query=spec.query_text, parameters=spec.parameters, **kwargs)
                .by_page(pageable.continuation_token)
            )
            try:
                documents = list(next(pager))
            except StopIteration:
                documents = []
            continuation_token = pager.continuation_token
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to query page {pageable.page} from {container_name}") from e

        logger.debug("Read page %d (%d items) from container %s", pageable.page, len(documents), container_name)
        return CosmosPage(
            content=[self.converter.read(entity_class, document) for document in documents],
            pageable=pageable,
            continuation_token=continuation_token or None,
        )

    def exists(self, query: DocumentQuery, entity_class: type[BaseModel], container_name: str | None = None) -> bool:
        return len(self.find(query.with_limit(1), entity_class, container_name)) > 0

    def count(
        self,
        container_name: str,
        query: DocumentQuery | None = None,
        entity_class: type[BaseModel] | None = None,
    ) -> int:
        """Count documents of a container.

        Args:
            container_name: Container name
            query: Optional query restricting the count
            entity_class: Entity class used to resolve field names and the partition key

        Returns:
            Number of matching documents
        """
        query = query or DocumentQuery()
        if entity_class is not None:
            spec, partition_key = self._prepare_query(query, self.entity_information(entity_class), count=True)
        else:
            spec, partition_key = self.query_generator.generate_count(query), None
        try:
            # Cross-partition aggregates may come back as partial results
            return int(sum(self._query_documents(container_name, spec, partition_key)))
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to count items in {container_name}") from e

    # ========================================================================
    # Deletes
    # ========================================================================

    def delete_by_id(self, container_name: str, item_id: Any, partition_key: Any, **options: Any) -> None:
        """Delete a document.

        A missing document is logged and ignored.
        """
        if item_id is None:
            raise ValueError("item_id must not be None")
        kwargs = {**self.factory.request_kwargs(), **options}
        try:
            self._container(container_name).delete_item(
                item=str(item_id), partition_key=self.converter.to_document_value(partition_key), **kwargs
            )
            logger.info("Deleted item %s from container %s", item_id, container_name)
        except CosmosResourceNotFoundError:
            logger.warning("Item %s not found for deletion in %s", item_id, container_name)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to delete item {item_id} from {container_name}") from e

    def delete_entity[T: BaseModel](self, container_name: str | None, entity: T) -> None:
        """Delete an entity, checking its etag when the entity is versioned."""
        info = self.entity_information(type(entity))
        container_name = self._container_name(type(entity), container_name)
        options = self._write_options(entity)
        options.pop("response_hook", None)
        self.delete_by_id(container_name, info.get_id(entity), self._partition_key_value(entity), **options)

    def delete[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> list[T]:
        """Delete entities matching a query.

        Returns:
            The deleted entities
        """
        info = self.entity_information(entity_class)
        container_name = self._container_name(entity_class, container_name)
        documents = self._find_documents(query, entity_class, container_name)
        for document in documents:
            self.delete_by_id(container_name, document["id"], self._partition_key_of(document, info))
        return [self.converter.read(entity_class, document) for document in documents]

    def delete_all(self, container_name: str, entity_class: type[BaseModel]) -> None:
        """Delete every document of a container, one by one."""
        deleted = self.delete(DocumentQuery(), entity_class, container_name)
        logger.info("Deleted %d items from container %s", len(deleted), container_name)
