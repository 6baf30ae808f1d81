"""Compiles criteria trees into parameterised Cosmos SQL."""

import logging
import re
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cosmos_data.core.convert.mapping_converter import MappingCosmosConverter
from cosmos_data.core.mapping.entity_information import ID_PROPERTY, CosmosEntityInformation
from cosmos_data.core.query.criteria import (
    CLOSED,
    COLLECTION,
    COMPARISON,
    FUNCTION,
    RANGE,
    UNARY,
    Criteria,
    CriteriaType,
)
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.sort import Order, Sort
from cosmos_data.exceptions import IllegalQueryError

logger = logging.getLogger(__name__)

ROOT_ALIAS = "r"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_$\-]+$")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_PARAM_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_]")


class SqlQuerySpec(BaseModel):
    """Query text plus named parameters in the SDK shape."""

    query_text: str
    parameters: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


def property_path(subject: str) -> str:
    """Render a (dotted) document property as a path on the root alias.

    Raises:
        IllegalQueryError: If the property name contains unsafe characters
    """
    segments = subject.split(".")
    if not subject or any(not _SEGMENT_RE.match(segment) for segment in segments):
        raise IllegalQueryError(f"Invalid property name '{subject}'")
    path = ROOT_ALIAS
    for segment in segments:
        path += f".{segment}" if _IDENTIFIER_RE.match(segment) else f'["{segment}"]'
    return path


class _ParameterBinder:
    """Collects parameters with unique names for one query."""

    def __init__(self, converter: MappingCosmosConverter) -> None:
        self._converter = converter
        self.parameters: list[dict[str, Any]] = []

    def bind(self, subject: str, value: Any) -> str:
        name = f"@{_PARAM_UNSAFE_RE.sub('_', subject)}{len(self.parameters)}"
        self.parameters.append({"name": name, "value": self._converter.to_document_value(value)})
        return name


class QueryGenerator:
    """Generates find and count queries from a :class:`DocumentQuery`."""

    def __init__(self, converter: MappingCosmosConverter) -> None:
        if converter is None:
            raise ValueError("converter must not be None")
        self.converter = converter

    # ========================================================================
    # Subject resolution
    # ========================================================================

    def resolve(self, query: DocumentQuery, info: CosmosEntityInformation | None) -> DocumentQuery:
        """Map python field names in criteria and sort to document properties."""
        if info is None:
            return query
        orders = tuple(Order(property=info.document_path(o.property), direction=o.direction) for o in query.sort)
        sort = Sort(orders=orders)
        return query.model_copy(update={"criteria": self._resolve_criteria(query.criteria, info), "sort": sort})

    def _resolve_criteria(self, criteria: Criteria, info: CosmosEntityInformation) -> Criteria:
        if criteria.sub_criteria:
            sub_criteria = tuple(self._resolve_criteria(c, info) for c in criteria.sub_criteria)
            return criteria.model_copy(update={"sub_criteria": sub_criteria})
        if criteria.subject is None:
            return criteria
        subject = info.document_path(criteria.subject)
        values = criteria.values
        if subject == ID_PROPERTY:
            # Document ids are always strings
            values = tuple([str(v) for v in value] if isinstance(value, list) else str(value) for value in values)
        return criteria.model_copy(update={"subject": subject, "values": values})

    # ========================================================================
    # Query generation
    # ========================================================================

    def generate_find(self, query: DocumentQuery) -> SqlQuerySpec:
        """SELECT query for ``query`` including ORDER BY and LIMIT."""
        binder = _ParameterBinder(self.converter)
        sql = f"SELECT * FROM ROOT {ROOT_ALIAS}" + self._where(query.criteria, binder)

        if query.sort.is_sorted:
            orders = ", ".join(f"{property_path(o.property)} {o.direction.value}" for o in query.sort)
            sql += f" ORDER BY {orders}"

        # Paged queries are bounded by max_item_count, not OFFSET/LIMIT
        if query.limit is not None and query.pageable is None:
            sql += f" OFFSET 0 LIMIT {int(query.limit)}"

        logger.debug("Generated find query: %s", sql)
        return SqlQuerySpec(query_text=sql, parameters=binder.parameters)

    def generate_count(self, query: DocumentQuery) -> SqlQuerySpec:
        """SELECT VALUE COUNT(1) query for ``query``."""
        binder = _ParameterBinder(self.converter)
        sql = f"SELECT VALUE COUNT(1) FROM {ROOT_ALIAS}" + self._where(query.criteria, binder)
        logger.debug("Generated count query: %s", sql)
        return SqlQuerySpec(query_text=sql, parameters=binder.parameters)

    def generate_find_by_ids(self, ids: Iterable[Any]) -> SqlQuerySpec:
        ids = [str(item_id) for item_id in ids]
        return SqlQuerySpec(
            query_text=f"SELECT * FROM ROOT {ROOT_ALIAS} WHERE ARRAY_CONTAINS(@ids, {ROOT_ALIAS}.{ID_PROPERTY})",
            parameters=[{"name": "@ids", "value": ids}],
        )

    def _where(self, criteria: Criteria, binder: _ParameterBinder) -> str:
        if criteria.type is CriteriaType.ALL:
            return ""
        return " WHERE " + self._condition(criteria, binder)

    def _condition(self, criteria: Criteria, binder: _ParameterBinder) -> str:
        criteria_type = criteria.type

        if criteria_type is CriteriaType.ALL:
            return "true"
        if criteria_type in (CriteriaType.AND, CriteriaType.OR):
            left, right = criteria.sub_criteria
            return (
                f"({self._condition(left, binder)} {criteria_type.sql_keyword} {self._condition(right, binder)})"
            )

        subject = criteria.subject
        path = property_path(subject)
        keyword = criteria_type.sql_keyword

        if criteria_type.kind == COMPARISON:
            param = binder.bind(subject, criteria.values[0])
            if criteria.ignore_case:
                return f"UPPER({path}) {keyword} UPPER({param})"
            return f"{path} {keyword} {param}"

        if criteria_type.kind == COLLECTION:
            values = criteria.values[0]
            if not values:
                # Empty IN matches nothing, empty NOT IN matches everything
                return "false" if criteria_type is CriteriaType.IN else "true"
            param = binder.bind(subject, values)
            return f"{keyword}({param}, {path})"

        if criteria_type.kind == RANGE:
            start = binder.bind(subject, criteria.values[0])
            end = binder.bind(subject, criteria.values[1])
            return f"({path} >= {start} AND {path} <= {end})"

        if criteria_type.kind == FUNCTION:
            param = binder.bind(subject, criteria.values[0])
            if criteria.ignore_case:
                return f"{keyword}({path}, {param}, true)"
            return f"{keyword}({path}, {param})"

        if criteria_type.kind == UNARY:
            return f"{keyword}({path})"

        if criteria_type.kind == CLOSED:
            return f"{path} = {keyword}"

        raise IllegalQueryError(f"Unsupported criteria type {criteria_type.name}")
