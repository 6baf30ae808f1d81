"""Repository-style persistence for Azure Cosmos DB."""

__version__ = "0.1.0"

from cosmos_data.config import CosmosDbConfig, get_cosmos_config  # noqa: E402
from cosmos_data.core import (  # noqa: E402
    CosmosDbFactory,
    CosmosOperations,
    CosmosTemplate,
    ReactiveCosmosOperations,
    ReactiveCosmosTemplate,
    ResponseDiagnostics,
)
from cosmos_data.core.convert import MappingCosmosConverter  # noqa: E402
from cosmos_data.core.mapping import IndexingPolicy, cosmos_document  # noqa: E402
from cosmos_data.core.query import (  # noqa: E402
    CosmosPage,
    Criteria,
    CriteriaType,
    DocumentQuery,
    Order,
    PageRequest,
    Sort,
    where,
)
from cosmos_data.repository import (  # noqa: E402
    CosmosRepository,
    ReactiveCosmosRepository,
    SimpleCosmosRepository,
    SimpleReactiveCosmosRepository,
)

__all__ = [
    "CosmosDbConfig",
    "CosmosDbFactory",
    "CosmosOperations",
    "CosmosPage",
    "CosmosRepository",
    "CosmosTemplate",
    "Criteria",
    "CriteriaType",
    "DocumentQuery",
    "IndexingPolicy",
    "MappingCosmosConverter",
    "Order",
    "PageRequest",
    "ReactiveCosmosOperations",
    "ReactiveCosmosRepository",
    "ReactiveCosmosTemplate",
    "ResponseDiagnostics",
    "SimpleCosmosRepository",
    "SimpleReactiveCosmosRepository",
    "Sort",
    "cosmos_document",
    "get_cosmos_config",
    "where",
]
