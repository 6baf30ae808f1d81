"""Core templates, factory and query support."""

from cosmos_data.core.cosmos_factory import CosmosDbFactory
from cosmos_data.core.cosmos_operations import CosmosOperations, ReactiveCosmosOperations
from cosmos_data.core.cosmos_template import CosmosTemplate
from cosmos_data.core.diagnostics import ResponseDiagnostics
from cosmos_data.core.reactive_cosmos_template import ReactiveCosmosTemplate

__all__ = [
    "CosmosDbFactory",
    "CosmosOperations",
    "CosmosTemplate",
    "ReactiveCosmosOperations",
    "ReactiveCosmosTemplate",
    "ResponseDiagnostics",
]
