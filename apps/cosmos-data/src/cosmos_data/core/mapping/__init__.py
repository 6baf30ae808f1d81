"""Entity mapping."""

from cosmos_data.core.mapping.document import DocumentSettings, IndexingPolicy, cosmos_document
from cosmos_data.core.mapping.entity_information import CosmosEntityInformation, get_entity_information

__all__ = [
    "CosmosEntityInformation",
    "DocumentSettings",
    "IndexingPolicy",
    "cosmos_document",
    "get_entity_information",
]
