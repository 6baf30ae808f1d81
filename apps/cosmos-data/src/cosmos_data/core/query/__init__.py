"""Query model: criteria, sort and paging."""

from cosmos_data.core.query.criteria import Criteria, CriteriaBuilder, CriteriaType, where
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.paging import CosmosPage, PageRequest
from cosmos_data.core.query.sort import Direction, Order, Sort

__all__ = [
    "CosmosPage",
    "Criteria",
    "CriteriaBuilder",
    "CriteriaType",
    "Direction",
    "DocumentQuery",
    "Order",
    "PageRequest",
    "Sort",
    "where",
]
