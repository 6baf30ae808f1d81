"""Cosmos SQL generation."""

from cosmos_data.core.generator.query_generator import QueryGenerator, SqlQuerySpec, property_path

__all__ = ["QueryGenerator", "SqlQuerySpec", "property_path"]
