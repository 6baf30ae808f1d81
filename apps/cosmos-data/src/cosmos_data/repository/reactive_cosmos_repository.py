"""Generic asynchronous repository over ReactiveCosmosOperations."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any

from pydantic import BaseModel

from cosmos_data.core.cosmos_operations import ReactiveCosmosOperations
from cosmos_data.core.mapping.entity_information import CosmosEntityInformation, get_entity_information
from cosmos_data.core.query.criteria import Criteria
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.paging import CosmosPage, PageRequest
from cosmos_data.core.query.sort import Sort
from cosmos_data.repository.query.part_tree import PartTree, QueryKind
from cosmos_data.repository.support import as_query, resolve_entity_class

logger = logging.getLogger(__name__)


class ReactiveCosmosRepository[T: BaseModel](ABC):
    """Abstract interface for asynchronous entity repositories."""

    @abstractmethod
    async def save(self, entity: T) -> T:
        """Insert a new entity or replace an existing one."""

    @abstractmethod
    def save_all(self, entities: Iterable[T]) -> AsyncIterator[T]:
        """Save several entities."""

    @abstractmethod
    async def find_by_id(self, item_id: Any, partition_key: Any = None) -> T | None:
        """Find an entity by id."""

    @abstractmethod
    async def exists_by_id(self, item_id: Any, partition_key: Any = None) -> bool:
        """Check whether an entity exists."""

    @abstractmethod
    def find_all(self, sort: Sort | None = None) -> AsyncIterator[T]:
        """Stream all entities."""

    @abstractmethod
    async def count(self) -> int:
        """Count all entities."""

    @abstractmethod
    async def delete_by_id(self, item_id: Any, partition_key: Any = None) -> None:
        """Delete an entity by id."""

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Delete an entity."""

    @abstractmethod
    async def delete_all(self, entities: Iterable[T] | None = None) -> None:
        """Delete the given entities, or all entities."""

    @abstractmethod
    async def delete_all_by_id(self, ids: Iterable[Any]) -> None:
        """Delete the entities with the given ids."""


class SimpleReactiveCosmosRepository[T: BaseModel](ReactiveCosmosRepository[T]):
    """ReactiveCosmosRepository backed by a ReactiveCosmosTemplate.

    The container is created on first use when the entity asks for it.
    Derived query methods return coroutines for count/exists and async
    iterators for find/delete.
    """

    entity_class: type[T] | None = None

    def __init__(self, operations: ReactiveCosmosOperations, entity_class: type[T] | None = None) -> None:
        if operations is None:
            raise ValueError("operations must not be None")

        self.operations = operations
        self.entity_class = resolve_entity_class(type(self), entity_class)
        self.information: CosmosEntityInformation[T] = get_entity_information(self.entity_class)
        self._container_ready = not self.information.auto_create_container
        self._container_lock = asyncio.Lock()

    @property
    def container_name(self) -> str:
        return self.information.container_name

    async def _ensure_container(self) -> None:
        if self._container_ready:
            return
        async with self._container_lock:
            if not self._container_ready:
                await self.operations.create_container_if_not_exists(self.information)
                self._container_ready = True

    async def save(self, entity: T) -> T:
        if entity is None:
            raise ValueError("entity must not be None")
        await self._ensure_container()
        if self.information.is_new(entity):
            return await self.operations.insert(entity, self.container_name)
        return await self.operations.upsert(entity, self.container_name)

    async def save_all(self, entities: Iterable[T]) -> AsyncIterator[T]:
        for entity in entities:
            yield await self.save(entity)

    async def insert(self, entity: T) -> T:
        await self._ensure_container()
        return await self.operations.insert(entity, self.container_name)

    async def find_by_id(self, item_id: Any, partition_key: Any = None) -> T | None:
        await self._ensure_container()
        return await self.operations.find_by_id(item_id, self.entity_class, partition_key, self.container_name)

    async def exists_by_id(self, item_id: Any, partition_key: Any = None) -> bool:
        return await self.find_by_id(item_id, partition_key) is not None

    async def find_all(self, sort: Sort | None = None) -> AsyncIterator[T]:
        await self._ensure_container()
        query = DocumentQuery(sort=sort or Sort.unsorted())
        async for entity in self.operations.find(query, self.entity_class, self.container_name):
            yield entity

    async def find_all_page(self, pageable: PageRequest) -> CosmosPage[T]:
        if pageable is None:
            raise ValueError("pageable must not be None")
        await self._ensure_container()
        query = DocumentQuery().with_pageable(pageable)
        return await self.operations.paginate_query(query, self.entity_class, self.container_name)

    async def find_all_by_id(self, ids: Iterable[Any]) -> AsyncIterator[T]:
        await self._ensure_container()
        async for entity in self.operations.find_by_ids(ids, self.entity_class, self.container_name):
            yield entity

    async def find_all_by_partition_key(self, partition_key: Any) -> AsyncIterator[T]:
        await self._ensure_container()
        async for entity in self.operations.find_all_by_partition_key(
            partition_key, self.entity_class, self.container_name
        ):
            yield entity

    async def find(self, query: DocumentQuery | Criteria) -> AsyncIterator[T]:
        await self._ensure_container()
        async for entity in self.operations.find(as_query(query), self.entity_class, self.container_name):
            yield entity

    async def count(self) -> int:
        await self._ensure_container()
        return await self.operations.count(self.container_name)

    async def delete_by_id(self, item_id: Any, partition_key: Any = None) -> None:
        if item_id is None:
            raise ValueError("item_id must not be None")
        await self._ensure_container()
        if partition_key is None:
            if self.information.partition_key_field is None:
                partition_key = item_id
            else:
                entity = await self.find_by_id(item_id)
                if entity is None:
                    logger.warning("Item %s not found for deletion in %s", item_id, self.container_name)
                    return
                partition_key = self.information.get_partition_key_value(entity)
        await self.operations.delete_by_id(self.container_name, item_id, partition_key)

    async def delete(self, entity: T) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        await self._ensure_container()
        await self.operations.delete_entity(self.container_name, entity)

    async def delete_all(self, entities: Iterable[T] | None = None) -> None:
        await self._ensure_container()
        if entities is None:
            await self.operations.delete_all(self.container_name, self.entity_class)
            return
        for entity in entities:
            await self.delete(entity)

    async def delete_all_by_id(self, ids: Iterable[Any]) -> None:
        if ids is None:
            raise ValueError("ids must not be None")
        for item_id in ids:
            await self.delete_by_id(item_id)

    # ========================================================================
    # Derived queries
    # ========================================================================

    async def _stream(self, tree: PartTree, query: DocumentQuery) -> AsyncIterator[T]:
        await self._ensure_container()
        if tree.kind is QueryKind.DELETE:
            results = self.operations.delete(query, self.entity_class, self.container_name)
        else:
            results = self.operations.find(query, self.entity_class, self.container_name)
        async for entity in results:
            yield entity

    async def _count(self, query: DocumentQuery) -> int:
        await self._ensure_container()
        return await self.operations.count(self.container_name, query, self.entity_class)

    async def _exists(self, query: DocumentQuery) -> bool:
        await self._ensure_container()
        return await self.operations.exists(query, self.entity_class, self.container_name)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_") or not PartTree.is_derived_query(name):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        entity_class = self.__dict__.get("entity_class")
        if entity_class is None:
            raise AttributeError(name)

        tree = PartTree.parse(name, entity_class)

        def derived_query(*args: Any) -> Any:
            query = tree.create_query(args)
            if tree.kind is QueryKind.COUNT:
                return self._count(query)
            if tree.kind is QueryKind.EXISTS:
                return self._exists(query)
            return self._stream(tree, query)

        derived_query.__name__ = name
        return derived_query
