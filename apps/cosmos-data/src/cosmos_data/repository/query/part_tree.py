"""Parses repository method names into criteria.

``find_by_last_name_and_age_greater_than_order_by_first_name_desc`` becomes
``last_name = ? AND age > ?`` sorted by ``first_name`` descending. Property
names are matched against the entity's fields, longest first, so fields
containing ``_and_`` or operator-like suffixes resolve unambiguously.
"""

import logging
import re
from collections.abc import Sequence
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict

from cosmos_data.core.query.criteria import Criteria, CriteriaType
from cosmos_data.core.query.document_query import DocumentQuery
from cosmos_data.core.query.sort import Order, Sort
from cosmos_data.exceptions import IllegalQueryError

logger = logging.getLogger(__name__)


class QueryKind(str, Enum):
    FIND = "find"
    COUNT = "count"
    EXISTS = "exists"
    DELETE = "delete"


_PREFIX_RE = re.compile(
    r"^(?P<verb>find|read|get|query|count|exists|delete)_"
    r"(?:(?P<first>first)_|top(?P<top>\d+)_|all_)?by_(?P<body>.+)$"
)

_VERBS = {
    "find": QueryKind.FIND,
    "read": QueryKind.FIND,
    "get": QueryKind.FIND,
    "query": QueryKind.FIND,
    "count": QueryKind.COUNT,
    "exists": QueryKind.EXISTS,
    "delete": QueryKind.DELETE,
}

_OPERATORS: dict[str, CriteriaType] = {
    "_is": CriteriaType.IS_EQUAL,
    "_equals": CriteriaType.IS_EQUAL,
    "_is_not": CriteriaType.NOT,
    "_not": CriteriaType.NOT,
    "_less_than": CriteriaType.LESS_THAN,
    "_less_than_equal": CriteriaType.LESS_THAN_EQUAL,
    "_greater_than": CriteriaType.GREATER_THAN,
    "_greater_than_equal": CriteriaType.GREATER_THAN_EQUAL,
    "_before": CriteriaType.BEFORE,
    "_after": CriteriaType.AFTER,
    "_between": CriteriaType.BETWEEN,
    "_in": CriteriaType.IN,
    "_not_in": CriteriaType.NOT_IN,
    "_is_null": CriteriaType.IS_NULL,
    "_is_not_null": CriteriaType.IS_NOT_NULL,
    "_exists": CriteriaType.EXISTS,
    "_not_exists": CriteriaType.NOT_EXISTS,
    "_starts_with": CriteriaType.STARTS_WITH,
    "_ends_with": CriteriaType.ENDS_WITH,
    "_containing": CriteriaType.CONTAINING,
    "_not_containing": CriteriaType.NOT_CONTAINING,
    "_array_contains": CriteriaType.ARRAY_CONTAINS,
    "_is_true": CriteriaType.TRUE,
    "_is_false": CriteriaType.FALSE,
}
# Longest suffix first so "_not_in" wins over "_in"
_OPERATOR_SUFFIXES = sorted(_OPERATORS, key=len, reverse=True)

_IGNORE_CASE = "_ignore_case"
_ORDER_BY = "_order_by_"
_AND = "_and_"
_OR = "_or_"


class Part(BaseModel):
    """One predicate of a derived query."""

    field: str
    type: CriteriaType
    ignore_case: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def arity(self) -> int:
        return self.type.arity

    def to_criteria(self, args: Sequence[Any]) -> Criteria:
        return Criteria.of(self.type, self.field, args, ignore_case=self.ignore_case)


class PartTree(BaseModel):
    """Parsed derived query: OR groups of AND-ed parts plus sort and limit."""

    method_name: str
    kind: QueryKind
    groups: tuple[tuple[Part, ...], ...]
    sort: Sort
    limit: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def arity(self) -> int:
        return sum(part.arity for group in self.groups for part in group)

    @staticmethod
    def is_derived_query(name: str) -> bool:
        return _PREFIX_RE.match(name) is not None

    @classmethod
    def parse(cls, method_name: str, entity_class: type[BaseModel]) -> "PartTree":
        """Parse ``method_name`` against the fields of ``entity_class``.

        Raises:
            IllegalQueryError: If the name is not a derived query or references unknown fields
        """
        return _parse(method_name, entity_class)

    def create_query(self, args: Sequence[Any]) -> DocumentQuery:
        """Bind positional arguments to the parts.

        Raises:
            TypeError: If the number of arguments does not match the parts
        """
        if len(args) != self.arity:
            raise TypeError(f"{self.method_name}() takes {self.arity} argument(s) but {len(args)} were given")

        position = 0
        criteria: Criteria | None = None
        for group in self.groups:
            group_criteria: Criteria | None = None
            for part in group:
                part_criteria = part.to_criteria(args[position : position + part.arity])
                position += part.arity
                group_criteria = part_criteria if group_criteria is None else group_criteria & part_criteria
            criteria = group_criteria if criteria is None else criteria | group_criteria

        return DocumentQuery(criteria=criteria or Criteria.all(), sort=self.sort, limit=self.limit)


def _field_names(entity_class: type[BaseModel]) -> list[str]:
    return sorted(entity_class.model_fields, key=len, reverse=True)


def _parse_groups(text: str, fields: list[str]) -> list[list[Part]] | None:
    """Parse ``field[op][_ignore_case]`` items joined by _and_/_or_, backtracking on ambiguity."""
    for field_name in fields:
        if not text.startswith(field_name):
            continue
        after_field = text[len(field_name) :]
        candidates: list[tuple[CriteriaType, str]] = [(CriteriaType.IS_EQUAL, after_field)]
        candidates += [
            (_OPERATORS[suffix], after_field[len(suffix) :])
            for suffix in _OPERATOR_SUFFIXES
            if after_field.startswith(suffix)
        ]
        for criteria_type, rest in candidates:
            ignore_case = False
            if rest.startswith(_IGNORE_CASE) and criteria_type.supports_ignore_case:
                ignore_case = True
                rest = rest[len(_IGNORE_CASE) :]
            part = Part(field=field_name, type=criteria_type, ignore_case=ignore_case)

            if rest == "":
                return [[part]]
            for joiner in (_AND, _OR):
                if rest.startswith(joiner):
                    tail = _parse_groups(rest[len(joiner) :], fields)
                    if tail is None:
                        continue
                    if joiner == _AND:
                        return [[part, *tail[0]], *tail[1:]]
                    return [[part], *tail]
    return None


def _parse_sort(text: str, fields: list[str]) -> Sort | None:
    for field_name in fields:
        if not text.startswith(field_name):
            continue
        rest = text[len(field_name) :]
        order = Order.asc(field_name)
        if rest.startswith("_desc"):
            order, rest = Order.desc(field_name), rest[len("_desc") :]
        elif rest.startswith("_asc"):
            rest = rest[len("_asc") :]
        if rest == "":
            return Sort(orders=(order,))
        if rest.startswith(_AND):
            tail = _parse_sort(rest[len(_AND) :], fields)
            if tail is not None:
                return Sort(orders=(order, *tail.orders))
    return None


@lru_cache(maxsize=512)
def _parse(method_name: str, entity_class: type[BaseModel]) -> PartTree:
    match = _PREFIX_RE.match(method_name)
    if match is None:
        raise IllegalQueryError(f"'{method_name}' is not a derived query method name")

    kind = _VERBS[match.group("verb")]
    limit = None
    if match.group("first"):
        limit = 1
    elif match.group("top"):
        limit = int(match.group("top"))
        if limit < 1:
            raise IllegalQueryError(f"Invalid limit in '{method_name}'")

    fields = _field_names(entity_class)
    body = match.group("body")
    sort = Sort.unsorted()
    if _ORDER_BY in body:
        body, _, order_text = body.partition(_ORDER_BY)
        parsed_sort = _parse_sort(order_text, fields)
        if parsed_sort is None:
            raise IllegalQueryError(f"Cannot parse order clause '{order_text}' of '{method_name}'")
        sort = parsed_sort

    groups = _parse_groups(body, fields)
    if groups is None:
        raise IllegalQueryError(
            f"Cannot derive query '{method_name}': no match for '{body}' in fields of {entity_class.__name__}"
        )

    tree = PartTree(
        method_name=method_name,
        kind=kind,
        groups=tuple(tuple(group) for group in groups),
        sort=sort,
        limit=limit,
    )
    logger.debug("Derived query %s for %s: %s", method_name, entity_class.__name__, tree)
    return tree
