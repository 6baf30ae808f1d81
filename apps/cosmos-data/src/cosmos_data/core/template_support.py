"""Logic shared by the synchronous and asynchronous templates."""

import logging
from typing import Any

from azure.core import MatchConditions
from azure.cosmos import PartitionKey
from azure.cosmos.exceptions import CosmosHttpResponseError
from pydantic import BaseModel

from cosmos_data.core.convert.mapping_converter import MappingCosmosConverter
from cosmos_data.core.cosmos_factory import CosmosDbFactory
from cosmos_data.core.generator.query_generator import QueryGenerator, SqlQuerySpec
from cosmos_data.core.mapping.entity_information import CosmosEntityInformation, get_entity_information
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.exceptions import CosmosAccessError, translate_cosmos_error

logger = logging.getLogger(__name__)


class CosmosTemplateSupport:
    """Entity lookup, query preparation and error translation."""

    def __init__(
        self,
        factory: CosmosDbFactory,
        converter: MappingCosmosConverter,
        database_name: str | None = None,
    ) -> None:
        """Initialize the template.

        Args:
            factory: Client factory
            converter: Entity/document converter
            database_name: Database name. If None, uses the factory database.

        Raises:
            ValueError: If factory or converter is None or the database name is empty
        """
        if factory is None:
            raise ValueError("factory must not be None")
        if converter is None:
            raise ValueError("converter must not be None")

        self.factory = factory
        self.converter = converter
        self.database_name = database_name if database_name is not None else factory.database_name
        if not self.database_name:
            raise ValueError("database_name must not be empty")
        self.query_generator = QueryGenerator(converter)

    @staticmethod
    def entity_information[T: BaseModel](entity_class: type[T]) -> CosmosEntityInformation[T]:
        return get_entity_information(entity_class)

    def get_container_name(self, entity_class: type[BaseModel]) -> str:
        """Container name mapped to ``entity_class``."""
        return get_entity_information(entity_class).container_name

    def _container_name(self, entity_class: type[BaseModel], container_name: str | None) -> str:
        return container_name or self.get_container_name(entity_class)

    def _container_options(self, info: CosmosEntityInformation) -> dict[str, Any]:
        options: dict[str, Any] = {
            "partition_key": PartitionKey(path=info.partition_key_path),
            "offer_throughput": info.request_units,
        }
        if info.time_to_live is not None:
            options["default_ttl"] = info.time_to_live
        if info.indexing_policy is not None:
            options["indexing_policy"] = info.indexing_policy.to_dict()
        return options

    def _write_options[T: BaseModel](self, entity: T) -> dict[str, Any]:
        """Request options for replacing or deleting ``entity``."""
        options = self.factory.request_kwargs()
        etag = get_entity_information(type(entity)).get_version(entity)
        if etag:
            options["etag"] = etag
            options["match_condition"] = MatchConditions.IfNotModified
        return options

    def _partition_key_value[T: BaseModel](self, entity: T) -> Any:
        info = get_entity_information(type(entity))
        return self.converter.to_document_value(info.get_partition_key_value(entity))

    def _prepare_query(
        self, query: DocumentQuery, info: CosmosEntityInformation, count: bool = False
    ) -> tuple[SqlQuerySpec, Any]:
        """Resolve subjects and generate SQL.

        Returns:
            Query spec and the pinned partition key value (None for cross-partition)
        """
        resolved = self.query_generator.resolve(query, info)
        spec = self.query_generator.generate_count(resolved) if count else self.query_generator.generate_find(resolved)
        partition_key = resolved.single_partition_key(info.partition_key_property)
        if partition_key is not None:
            partition_key = self.converter.to_document_value(partition_key)
        return spec, partition_key

    def _error(self, e: CosmosHttpResponseError, message: str) -> CosmosAccessError:
        logger.error("%s: %s", message, e)
        return translate_cosmos_error(e, message)

    @staticmethod
    def _partition_key_of(document: dict[str, Any], info: CosmosEntityInformation) -> Any:
        return document.get(info.partition_key_property)
