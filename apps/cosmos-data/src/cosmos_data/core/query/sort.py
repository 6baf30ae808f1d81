"""Sort orders for queries."""

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class Order(BaseModel):
    """Sort order on one property."""

    property: str = Field(..., min_length=1, description="Field name or document property")
    direction: Direction = Field(default=Direction.ASC, description="Sort direction")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def asc(cls, property_name: str) -> "Order":
        return cls(property=property_name, direction=Direction.ASC)

    @classmethod
    def desc(cls, property_name: str) -> "Order":
        return cls(property=property_name, direction=Direction.DESC)


class Sort(BaseModel):
    """Ordered list of :class:`Order`."""

    orders: tuple[Order, ...] = ()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def by(cls, *orders: str | Order) -> "Sort":
        """Build a sort from property names (ascending) or explicit orders."""
        return cls(orders=tuple(o if isinstance(o, Order) else Order.asc(o) for o in orders))

    @classmethod
    def unsorted(cls) -> "Sort":
        return cls()

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def and_(self, other: "Sort") -> "Sort":
        return Sort(orders=self.orders + other.orders)

    def __iter__(self) -> Iterator[Order]:  # type: ignore[override]
        return iter(self.orders)
