"""Query wrapper combining criteria, sort, limit and paging."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cosmos_data.core.query.criteria import Criteria, CriteriaType
from cosmos_data.core.query.paging import PageRequest
from cosmos_data.core.query.sort import Sort

_NO_PARTITION = object()


class DocumentQuery(BaseModel):
    """Criteria tree plus result shaping options.

    The criteria may be passed positionally: ``DocumentQuery(where("age").greater_than(1))``.
    """

    criteria: Criteria = Field(default_factory=Criteria.all)
    sort: Sort = Field(default_factory=Sort.unsorted)
    limit: int | None = Field(default=None, gt=0, description="Maximum number of results")
    pageable: PageRequest | None = None

    model_config = ConfigDict(frozen=True)

    def __init__(self, criteria: Criteria | None = None, /, **data: Any) -> None:
        if criteria is not None:
            data["criteria"] = criteria
        super().__init__(**data)

    def with_sort(self, sort: Sort) -> "DocumentQuery":
        return self.model_copy(update={"sort": self.sort.and_(sort)})

    def with_limit(self, limit: int) -> "DocumentQuery":
        return DocumentQuery(criteria=self.criteria, sort=self.sort, limit=limit, pageable=self.pageable)

    def with_pageable(self, pageable: PageRequest) -> "DocumentQuery":
        return self.model_copy(update={"pageable": pageable, "sort": self.sort.and_(pageable.sort)})

    def get_criteria_by_type(self, criteria_type: CriteriaType) -> Criteria | None:
        """First criteria of ``criteria_type`` in depth-first order."""
        for criteria in self.criteria.walk():
            if criteria.type is criteria_type:
                return criteria
        return None

    def single_partition_key(self, partition_key_property: str) -> Any:
        """Partition key value pinned by the criteria.

        Only an IS_EQUAL on the partition key reached through AND nodes
        restricts the query to one partition.

        Returns:
            The partition key value, or None for cross-partition queries
        """
        value = _pinned_value(self.criteria, partition_key_property)
        return None if value is _NO_PARTITION else value

    def is_cross_partition_query(self, partition_key_property: str) -> bool:
        return _pinned_value(self.criteria, partition_key_property) is _NO_PARTITION


def _pinned_value(criteria: Criteria, partition_key_property: str) -> Any:
    if criteria.type is CriteriaType.IS_EQUAL:
        if criteria.subject == partition_key_property and not criteria.ignore_case:
            return criteria.values[0]
        return _NO_PARTITION
    if criteria.type is CriteriaType.AND:
        for sub in criteria.sub_criteria:
            value = _pinned_value(sub, partition_key_property)
            if value is not _NO_PARTITION:
                return value
    return _NO_PARTITION
