"""Entity conversion."""

from cosmos_data.core.convert.mapping_converter import COSMOS_SYSTEM_FIELDS, MappingCosmosConverter

__all__ = ["COSMOS_SYSTEM_FIELDS", "MappingCosmosConverter"]
