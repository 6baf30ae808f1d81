"""Filter criteria translated into Cosmos SQL by the query generator."""

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from cosmos_data.exceptions import IllegalQueryError

LOGICAL = "logical"
COMPARISON = "comparison"
COLLECTION = "collection"
RANGE = "range"
FUNCTION = "function"
UNARY = "unary"
CLOSED = "closed"


class CriteriaType(str, Enum):
    """Supported criteria with their SQL keyword and value arity."""

    sql_keyword: str
    kind: str
    arity: int

    def __new__(cls, value: str, sql_keyword: str, kind: str, arity: int) -> "CriteriaType":
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.sql_keyword = sql_keyword
        obj.kind = kind
        obj.arity = arity
        return obj

    ALL = ("ALL", "", LOGICAL, 0)
    AND = ("AND", "AND", LOGICAL, 0)
    OR = ("OR", "OR", LOGICAL, 0)

    IS_EQUAL = ("IS_EQUAL", "=", COMPARISON, 1)
    NOT = ("NOT", "<>", COMPARISON, 1)
    BEFORE = ("BEFORE", "<", COMPARISON, 1)
    AFTER = ("AFTER", ">", COMPARISON, 1)
    LESS_THAN = ("LESS_THAN", "<", COMPARISON, 1)
    LESS_THAN_EQUAL = ("LESS_THAN_EQUAL", "<=", COMPARISON, 1)
    GREATER_THAN = ("GREATER_THAN", ">", COMPARISON, 1)
    GREATER_THAN_EQUAL = ("GREATER_THAN_EQUAL", ">=", COMPARISON, 1)

    IN = ("IN", "ARRAY_CONTAINS", COLLECTION, 1)
    NOT_IN = ("NOT_IN", "NOT ARRAY_CONTAINS", COLLECTION, 1)
    BETWEEN = ("BETWEEN", "BETWEEN", RANGE, 2)

    STARTS_WITH = ("STARTS_WITH", "STARTSWITH", FUNCTION, 1)
    ENDS_WITH = ("ENDS_WITH", "ENDSWITH", FUNCTION, 1)
    CONTAINING = ("CONTAINING", "CONTAINS", FUNCTION, 1)
    NOT_CONTAINING = ("NOT_CONTAINING", "NOT CONTAINS", FUNCTION, 1)
    ARRAY_CONTAINS = ("ARRAY_CONTAINS", "ARRAY_CONTAINS", FUNCTION, 1)

    IS_NULL = ("IS_NULL", "IS_NULL", UNARY, 0)
    IS_NOT_NULL = ("IS_NOT_NULL", "NOT IS_NULL", UNARY, 0)
    EXISTS = ("EXISTS", "IS_DEFINED", UNARY, 0)
    NOT_EXISTS = ("NOT_EXISTS", "NOT IS_DEFINED", UNARY, 0)

    TRUE = ("TRUE", "true", CLOSED, 0)
    FALSE = ("FALSE", "false", CLOSED, 0)

    @property
    def is_logical(self) -> bool:
        return self.kind == LOGICAL

    @property
    def supports_ignore_case(self) -> bool:
        return self in _IGNORE_CASE_TYPES


_IGNORE_CASE_TYPES = frozenset(
    {
        CriteriaType.IS_EQUAL,
        CriteriaType.NOT,
        CriteriaType.STARTS_WITH,
        CriteriaType.ENDS_WITH,
        CriteriaType.CONTAINING,
        CriteriaType.NOT_CONTAINING,
    }
)


class Criteria(BaseModel):
    """A node of the criteria tree.

    Leaf nodes hold a subject (document property) and values; AND/OR nodes
    hold two sub criteria. Build them with :meth:`of`, :meth:`and_`,
    :meth:`or_` or :func:`where`.
    """

    type: CriteriaType
    subject: str | None = None
    values: tuple[Any, ...] = ()
    sub_criteria: tuple["Criteria", ...] = ()
    ignore_case: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(
        cls,
        criteria_type: CriteriaType,
        subject: str,
        values: Iterable[Any] = (),
        ignore_case: bool = False,
    ) -> "Criteria":
        """Create a leaf criteria.

        Args:
            criteria_type: Comparison, collection, function or unary type
            subject: Document property the criteria applies to
            values: Values consumed by the criteria type (IN takes one iterable)
            ignore_case: Compare strings case-insensitively

        Raises:
            IllegalQueryError: If arity, subject or ignore_case do not fit the type
        """
        if criteria_type.is_logical:
            raise IllegalQueryError(f"{criteria_type.name} is not a leaf criteria type")
        if not subject:
            raise IllegalQueryError(f"{criteria_type.name} criteria requires a subject")

        values = tuple(values)
        if len(values) != criteria_type.arity:
            raise IllegalQueryError(
                f"{criteria_type.name} on '{subject}' expects {criteria_type.arity} value(s), got {len(values)}"
            )
        if criteria_type.kind == COLLECTION:
            collection = values[0]
            if isinstance(collection, (str, bytes)) or not isinstance(collection, Iterable):
                raise IllegalQueryError(f"{criteria_type.name} on '{subject}' expects a collection of values")
            values = (list(collection),)
        if ignore_case and not criteria_type.supports_ignore_case:
            raise IllegalQueryError(f"{criteria_type.name} does not support ignore_case")

        return cls(type=criteria_type, subject=subject, values=values, ignore_case=ignore_case)

    @classmethod
    def all(cls) -> "Criteria":
        """Criteria matching every document."""
        return cls(type=CriteriaType.ALL)

    @classmethod
    def and_(cls, left: "Criteria", right: "Criteria") -> "Criteria":
        if left.type is CriteriaType.ALL:
            return right
        if right.type is CriteriaType.ALL:
            return left
        return cls(type=CriteriaType.AND, sub_criteria=(left, right))

    @classmethod
    def or_(cls, left: "Criteria", right: "Criteria") -> "Criteria":
        if CriteriaType.ALL in (left.type, right.type):
            return cls.all()
        return cls(type=CriteriaType.OR, sub_criteria=(left, right))

    def __and__(self, other: "Criteria") -> "Criteria":
        return Criteria.and_(self, other)

    def __or__(self, other: "Criteria") -> "Criteria":
        return Criteria.or_(self, other)

    def walk(self) -> Iterable["Criteria"]:
        """Depth-first iteration over this node and its descendants."""
        yield self
        for sub in self.sub_criteria:
            yield from sub.walk()


class CriteriaBuilder:
    """Fluent builder returned by :func:`where`."""

    def __init__(self, subject: str) -> None:
        self.subject = subject

    def _leaf(self, criteria_type: CriteriaType, *values: Any, ignore_case: bool = False) -> Criteria:
        return Criteria.of(criteria_type, self.subject, values, ignore_case=ignore_case)

    def is_equal(self, value: Any, ignore_case: bool = False) -> Criteria:
        return self._leaf(CriteriaType.IS_EQUAL, value, ignore_case=ignore_case)

    def is_not(self, value: Any, ignore_case: bool = False) -> Criteria:
        return self._leaf(CriteriaType.NOT, value, ignore_case=ignore_case)

    def less_than(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.LESS_THAN, value)

    def less_than_equal(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.LESS_THAN_EQUAL, value)

    def greater_than(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.GREATER_THAN, value)

    def greater_than_equal(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.GREATER_THAN_EQUAL, value)

    def before(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.BEFORE, value)

    def after(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.AFTER, value)

    def between(self, start: Any, end: Any) -> Criteria:
        return self._leaf(CriteriaType.BETWEEN, start, end)

    def in_(self, values: Iterable[Any]) -> Criteria:
        return self._leaf(CriteriaType.IN, values)

    def not_in(self, values: Iterable[Any]) -> Criteria:
        return self._leaf(CriteriaType.NOT_IN, values)

    def starts_with(self, value: str, ignore_case: bool = False) -> Criteria:
        return self._leaf(CriteriaType.STARTS_WITH, value, ignore_case=ignore_case)

    def ends_with(self, value: str, ignore_case: bool = False) -> Criteria:
        return self._leaf(CriteriaType.ENDS_WITH, value, ignore_case=ignore_case)

    def containing(self, value: str, ignore_case: bool = False) -> Criteria:
        return self._leaf(CriteriaType.CONTAINING, value, ignore_case=ignore_case)

    def not_containing(self, value: str, ignore_case: bool = False) -> Criteria:
        return self._leaf(CriteriaType.NOT_CONTAINING, value, ignore_case=ignore_case)

    def array_contains(self, value: Any) -> Criteria:
        return self._leaf(CriteriaType.ARRAY_CONTAINS, value)

    def is_null(self) -> Criteria:
        return self._leaf(CriteriaType.IS_NULL)

    def is_not_null(self) -> Criteria:
        return self._leaf(CriteriaType.IS_NOT_NULL)

    def exists(self) -> Criteria:
        return self._leaf(CriteriaType.EXISTS)

    def not_exists(self) -> Criteria:
        return self._leaf(CriteriaType.NOT_EXISTS)

    def is_true(self) -> Criteria:
        return self._leaf(CriteriaType.TRUE)

    def is_false(self) -> Criteria:
        return self._leaf(CriteriaType.FALSE)


def where(subject: str) -> CriteriaBuilder:
    """Start a criteria on ``subject``, e.g. ``where("lastName").is_equal("Doe")``."""
    return CriteriaBuilder(subject)
