"""Generic synchronous repository over CosmosOperations."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from cosmos_data.core.cosmos_operations import CosmosOperations
from cosmos_data.core.mapping.entity_information import CosmosEntityInformation, get_entity_information
from cosmos_data.core.query.criteria import Criteria
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.paging import CosmosPage, PageRequest
from cosmos_data.core.query.sort import Sort
from cosmos_data.repository.query.part_tree import PartTree, QueryKind
from cosmos_data.repository.support import as_query, resolve_entity_class

logger = logging.getLogger(__name__)


class CosmosRepository[T: BaseModel](ABC):
    """Abstract interface for entity repositories."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert a new entity or replace an existing one."""

    @abstractmethod
    def save_all(self, entities: Iterable[T]) -> list[T]:
        """Save several entities."""

    @abstractmethod
    def find_by_id(self, item_id: Any, partition_key: Any = None) -> T | None:
        """Find an entity by id."""

    @abstractmethod
    def exists_by_id(self, item_id: Any, partition_key: Any = None) -> bool:
        """Check whether an entity exists."""

    @abstractmethod
    def find_all(self, sort: Sort | None = None) -> list[T]:
        """Find all entities."""

    @abstractmethod
    def find_all_page(self, pageable: PageRequest) -> CosmosPage[T]:
        """Find one page of entities."""

    @abstractmethod
    def find_all_by_id(self, ids: Iterable[Any]) -> list[T]:
        """Find entities by ids."""

    @abstractmethod
    def count(self) -> int:
        """Count all entities."""

    @abstractmethod
    def delete_by_id(self, item_id: Any, partition_key: Any = None) -> None:
        """Delete an entity by id."""

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Delete an entity."""

    @abstractmethod
    def delete_all(self, entities: Iterable[T] | None = None) -> None:
        """Delete the given entities, or all entities."""

    @abstractmethod
    def delete_all_by_id(self, ids: Iterable[Any]) -> None:
        """Delete the entities with the given ids."""


class SimpleCosmosRepository[T: BaseModel](CosmosRepository[T]):
    """CosmosRepository backed by a CosmosOperations template.

    Subclass with the entity as type argument and call derived queries by name::

        class UserRepository(SimpleCosmosRepository[User]):
            pass

        repository = UserRepository(template)
        repository.find_by_last_name_and_first_name("Doe", "Jane")
    """

    entity_class: type[T] | None = None

    def __init__(self, operations: CosmosOperations, entity_class: type[T] | None = None) -> None:
        """Initialize the repository.

        Args:
            operations: Template executing the operations
            entity_class: Entity class. If None, taken from the generic base class.
        """
        if operations is None:
            raise ValueError("operations must not be None")

        self.operations = operations
        self.entity_class = resolve_entity_class(type(self), entity_class)
        self.information: CosmosEntityInformation[T] = get_entity_information(self.entity_class)

        if self.information.auto_create_container:
            self.operations.create_container_if_not_exists(self.information)

    @property
    def container_name(self) -> str:
        return self.information.container_name

    def save(self, entity: T) -> T:
        if entity is None:
            raise ValueError("entity must not be None")
        if self.information.is_new(entity):
            return self.operations.insert(entity, self.container_name)
        return self.operations.upsert(entity, self.container_name)

    def save_all(self, entities: Iterable[T]) -> list[T]:
        if entities is None:
            raise ValueError("entities must not be None")
        return [self.save(entity) for entity in entities]

    def insert(self, entity: T) -> T:
        return self.operations.insert(entity, self.container_name)

    def find_by_id(self, item_id: Any, partition_key: Any = None) -> T | None:
        return self.operations.find_by_id(item_id, self.entity_class, partition_key, self.container_name)

    def exists_by_id(self, item_id: Any, partition_key: Any = None) -> bool:
        return self.find_by_id(item_id, partition_key) is not None

    def find_all(self, sort: Sort | None = None) -> list[T]:
        if sort is None or not sort.is_sorted:
            return self.operations.find_all(self.entity_class, self.container_name)
        return self.operations.find(DocumentQuery(sort=sort), self.entity_class, self.container_name)

    def find_all_page(self, pageable: PageRequest) -> CosmosPage[T]:
        if pageable is None:
            raise ValueError("pageable must not be None")
        query = DocumentQuery().with_pageable(pageable)
        return self.operations.paginate_query(query, self.entity_class, self.container_name)

    def find_all_by_id(self, ids: Iterable[Any]) -> list[T]:
        if ids is None:
            raise ValueError("ids must not be None")
        return self.operations.find_by_ids(ids, self.entity_class, self.container_name)

    def find_all_by_partition_key(self, partition_key: Any) -> list[T]:
        return self.operations.find_all_by_partition_key(partition_key, self.entity_class, self.container_name)

    def find(self, query: DocumentQuery | Criteria) -> list[T]:
        return self.operations.find(as_query(query), self.entity_class, self.container_name)

    def count(self) -> int:
        return self.operations.count(self.container_name)

    def delete_by_id(self, item_id: Any, partition_key: Any = None) -> None:
        """Delete an entity by id.

        Without a partition key on a container partitioned by another field
        the entity is looked up first to learn its partition key.
        """
        if item_id is None:
            raise ValueError("item_id must not be None")
        if partition_key is None:
            if self.information.partition_key_field is None:
                partition_key = item_id
            else:
                entity = self.find_by_id(item_id)
                if entity is None:
                    logger.warning("Item %s not found for deletion in %s", item_id, self.container_name)
                    return
                partition_key = self.information.get_partition_key_value(entity)
        self.operations.delete_by_id(self.container_name, item_id, partition_key)

    def delete(self, entity: T) -> None:
        if entity is None:
            raise ValueError("entity must not be None")
        self.operations.delete_entity(self.container_name, entity)

    def delete_all(self, entities: Iterable[T] | None = None) -> None:
        if entities is None:
            self.operations.delete_all(self.container_name, self.entity_class)
            return
        for entity in entities:
            self.delete(entity)

    def delete_all_by_id(self, ids: Iterable[Any]) -> None:
        if ids is None:
            raise ValueError("ids must not be None")
        for item_id in ids:
            self.delete_by_id(item_id)

    # ========================================================================
    # Derived queries
    # ========================================================================

    def _execute(self, tree: PartTree, args: tuple[Any, ...]) -> Any:
        query = tree.create_query(args)
        if tree.kind is QueryKind.COUNT:
            return self.operations.count(self.container_name, query, self.entity_class)
        if tree.kind is QueryKind.EXISTS:
            return self.operations.exists(query, self.entity_class, self.container_name)
        if tree.kind is QueryKind.DELETE:
            return self.operations.delete(query, self.entity_class, self.container_name)
        return self.operations.find(query, self.entity_class, self.container_name)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_") or not PartTree.is_derived_query(name):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        # Reached before __init__ finished, e.g. during unpickling
        entity_class = self.__dict__.get("entity_class")
        if entity_class is None:
            raise AttributeError(name)

        tree = PartTree.parse(name, entity_class)

        def derived_query(*args: Any) -> Any:
            return self._execute(tree, args)

        derived_query.__name__ = name
        return derived_query
