"""Derived query support."""

from cosmos_data.repository.query.part_tree import Part, PartTree, QueryKind

__all__ = ["Part", "PartTree", "QueryKind"]
