"""Asynchronous template on the asyncio Cosmos DB SDK."""

import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any

from azure.cosmos.aio import ContainerProxy, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from pydantic import BaseModel

from cosmos_data.core.cosmos_operations import ReactiveCosmosOperations
from cosmos_data.core.generator.query_generator import SqlQuerySpec
from cosmos_data.core.mapping.entity_information import CosmosEntityInformation
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.paging import CosmosPage, PageRequest
from cosmos_data.core.template_support import CosmosTemplateSupport
from cosmos_data.exceptions import DatabaseCreationError

logger = logging.getLogger(__name__)


class ReactiveCosmosTemplate(CosmosTemplateSupport, ReactiveCosmosOperations):
    """Cosmos DB implementation of ReactiveCosmosOperations.

    Single results are returned by coroutines, multiple results are
    streamed through async iterators.
    """

    def _database(self) -> DatabaseProxy:
        return self.factory.async_client.get_database_client(self.database_name)

    def _container(self, container_name: str) -> ContainerProxy:
        return self._database().get_container_client(container_name)

    async def _iter_documents(
        self, container_name: str, spec: SqlQuerySpec, partition_key: Any = None
    ) -> AsyncIterator[dict[str, Any]]:
        kwargs = self.factory.query_kwargs()
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        try:
            items = self._container(container_name).query_items(
                query=spec.query_text, parameters=spec.parameters, **kwargs
            )
            async for document in items:
                yield document
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to query items from {container_name}") from e

    async def create_container_if_not_exists(self, entity_information: CosmosEntityInformation) -> dict[str, Any]:
        """Create the database and container for an entity if missing."""
        container_name = entity_information.container_name
        try:
            client = self.factory.async_client
            if self.factory.config.auto_create_database:
                database = await client.create_database_if_not_exists(id=self.database_name)
            else:
                database = client.get_database_client(self.database_name)
            container = await database.create_container_if_not_exists(
                id=container_name, **self._container_options(entity_information)
            )
            logger.info(
                "Container '%s' initialized with partition key '%s'",
                container_name,
                entity_information.partition_key_path,
            )
            return await container.read(**self.factory.request_kwargs())
        except CosmosHttpResponseError as e:
            logger.error("Failed to create container '%s': %s", container_name, e)
            raise DatabaseCreationError(f"Failed to create container '{container_name}': {e.message}") from e

    async def delete_container(self, container_name: str) -> None:
        try:
            await self._database().delete_container(container_name, **self.factory.request_kwargs())
            logger.info("Deleted container %s", container_name)
        except CosmosResourceNotFoundError:
            logger.warning("Container %s not found for deletion", container_name)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to delete container {container_name}") from e

    async def insert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        entity_class = type(entity)
        container_name = self._container_name(entity_class, container_name)
        document = self.converter.write(entity)
        document.pop("_etag", None)
        try:
            created = await self._container(container_name).create_item(
                body=document, **self.factory.request_kwargs()
            )
            logger.info("Created item %s in container %s", created["id"], container_name)
            return self.converter.read(entity_class, created)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to insert item {document.get('id')} into {container_name}") from e

    async def upsert[T: BaseModel](self, entity: T, container_name: str | None = None) -> T:
        entity_class = type(entity)
        container_name = self._container_name(entity_class, container_name)
        document = self.converter.write(entity)
        document.pop("_etag", None)
        try:
            upserted = await self._container(container_name).upsert_item(
                body=document, **self._write_options(entity)
            )
            logger.info("Upserted item %s in container %s", upserted["id"], container_name)
            return self.converter.read(entity_class, upserted)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to upsert item {document.get('id')} into {container_name}") from e

    async def find_by_id[T: BaseModel](
        self,
        item_id: Any,
        entity_class: type[T],
        partition_key: Any = None,
        container_name: str | None = None,
    ) -> T | None:
        if item_id is None:
            raise ValueError("item_id must not be None")

        info = self.entity_information(entity_class)
        container_name = self._container_name(entity_class, container_name)
        item_id = str(item_id)
        if partition_key is None and info.partition_key_field is None:
            partition_key = item_id

        if partition_key is None:
            spec = self.query_generator.generate_find_by_ids([item_id])
            async for document in self._iter_documents(container_name, spec):
                return self.converter.read(entity_class, document)
            return None

        try:
            document = await self._container(container_name).read_item(
                item=item_id,
                partition_key=self.converter.to_document_value(partition_key),
                **self.factory.request_kwargs(),
            )
        except CosmosResourceNotFoundError:
            logger.debug("Item %s not found in container %s", item_id, container_name)
            return None
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to read item {item_id} from {container_name}") from e
        return self.converter.read(entity_class, document)

    async def find_by_ids[T: BaseModel](
        self, ids: Iterable[Any], entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        container_name = self._container_name(entity_class, container_name)
        spec = self.query_generator.generate_find_by_ids(ids)
        async for document in self._iter_documents(container_name, spec):
            yield self.converter.read(entity_class, document)

    async def find_all[T: BaseModel](
        self, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        async for entity in self.find(DocumentQuery(), entity_class, container_name):
            yield entity

    async def find_all_by_partition_key[T: BaseModel](
        self, partition_key: Any, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        if partition_key is None:
            raise ValueError("partition_key must not be None")
        container_name = self._container_name(entity_class, container_name)
        spec, _ = self._prepare_query(DocumentQuery(), self.entity_information(entity_class))
        pk_value = self.converter.to_document_value(partition_key)
        async for document in self._iter_documents(container_name, spec, pk_value):
            yield self.converter.read(entity_class, document)

    async def find[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        container_name = self._container_name(entity_class, container_name)
        spec, partition_key = self._prepare_query(query, self.entity_information(entity_class))
        async for document in self._iter_documents(container_name, spec, partition_key):
            yield self.converter.read(entity_class, document)

    async def paginate_query[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> CosmosPage[T]:
        pageable = query.pageable or PageRequest()
        query = query.with_pageable(pageable) if query.pageable is None else query
        container_name = self._container_name(entity_class, container_name)
        spec, partition_key = self._prepare_query(query, self.entity_information(entity_class))

        kwargs = self.factory.query_kwargs()
        kwargs["max_item_count"] = pageable.size
        if partition_key is not None:
            kwargs["partition_key"] = partition_key

        try:
            pager = (
                self._container(container_name)
                .query_items(query=spec.query_text, parameters=spec.parameters, **kwargs)
                .by_page(pageable.continuation_token)
            )
            documents: list[dict[str, Any]] = []
            async for page in pager:
                documents = [document async for document in page]
                break
            continuation_token = pager.continuation_token
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to query page {pageable.page} from {container_name}") from e

        return CosmosPage(
            content=[self.converter.read(entity_class, document) for document in documents],
            pageable=pageable,
            continuation_token=continuation_token or None,
        )

    async def exists(
        self, query: DocumentQuery, entity_class: type[BaseModel], container_name: str | None = None
    ) -> bool:
        async for _ in self.find(query.with_limit(1), entity_class, container_name):
            return True
        return False

    async def count(
        self,
        container_name: str,
        query: DocumentQuery | None = None,
        entity_class: type[BaseModel] | None = None,
    ) -> int:
        query = query or DocumentQuery()
        if entity_class is not None:
            spec, partition_key = self._prepare_query(query, self.entity_information(entity_class), count=True)
        else:
            spec, partition_key = self.query_generator.generate_count(query), None
        total = 0
        async for partial in self._iter_documents(container_name, spec, partition_key):
            total += int(partial)
        return total

    async def delete_by_id(self, container_name: str, item_id: Any, partition_key: Any, **options: Any) -> None:
        if item_id is None:
            raise ValueError("item_id must not be None")
        kwargs = {**self.factory.request_kwargs(), **options}
        try:
            await self._container(container_name).delete_item(
                item=str(item_id), partition_key=self.converter.to_document_value(partition_key), **kwargs
            )
            logger.info("Deleted item %s from container %s", item_id, container_name)
        except CosmosResourceNotFoundError:
            logger.warning("Item %s not found for deletion in %s", item_id, container_name)
        except CosmosHttpResponseError as e:
            raise self._error(e, f"Failed to delete item {item_id} from {container_name}") from e

    async def delete_entity[T: BaseModel](self, container_name: str | None, entity: T) -> None:
        info = self.entity_information(type(entity))
        container_name = self._container_name(type(entity), container_name)
        options = self._write_options(entity)
        options.pop("response_hook", None)
        await self.delete_by_id(container_name, info.get_id(entity), self._partition_key_value(entity), **options)

    async def delete[T: BaseModel](
        self, query: DocumentQuery, entity_class: type[T], container_name: str | None = None
    ) -> AsyncIterator[T]:
        info = self.entity_information(entity_class)
        container_name = self._container_name(entity_class, container_name)
        spec, partition_key = self._prepare_query(query, info)
        # Collect first so deletes do not disturb the running query
        documents = [document async for document in self._iter_documents(container_name, spec, partition_key)]
        for document in documents:
            await self.delete_by_id(container_name, document["id"], self._partition_key_of(document, info))
            yield self.converter.read(entity_class, document)

    async def delete_all(self, container_name: str, entity_class: type[BaseModel]) -> None:
        deleted = 0
        async for _ in self.delete(DocumentQuery(), entity_class, container_name):
            deleted += 1
        logger.info("Deleted %d items from container %s", deleted, container_name)
