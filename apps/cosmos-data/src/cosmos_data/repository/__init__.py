"""Repositories."""

from cosmos_data.repository.cosmos_repository import CosmosRepository, SimpleCosmosRepository
from cosmos_data.repository.reactive_cosmos_repository import (
    ReactiveCosmosRepository,
    SimpleReactiveCosmosRepository,
)

__all__ = [
    "CosmosRepository",
    "ReactiveCosmosRepository",
    "SimpleCosmosRepository",
    "SimpleReactiveCosmosRepository",
]
