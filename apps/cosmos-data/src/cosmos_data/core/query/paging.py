"""Continuation-token based paging."""

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from cosmos_data.core.query.sort import Sort


class PageRequest(BaseModel):
    """Request for one page of results.

    Cosmos DB pages forward only: the next page is addressed by the
    continuation token returned with the previous one, ``page`` is kept
    for callers that display page numbers.
    """

    page: int = Field(default=0, ge=0, description="Zero-based page number")
    size: int = Field(default=20, gt=0, description="Maximum items per page")
    sort: Sort = Field(default_factory=Sort.unsorted)
    continuation_token: str | None = Field(default=None, description="Token of the page to read")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, page: int, size: int, sort: Sort | None = None) -> "PageRequest":
        return cls(page=page, size=size, sort=sort or Sort.unsorted())

    def next(self, continuation_token: str) -> "PageRequest":
        return self.model_copy(update={"page": self.page + 1, "continuation_token": continuation_token})


class CosmosPage[T](BaseModel):
    """A page of entities plus the token addressing the next page."""

    content: list[T]
    pageable: PageRequest
    continuation_token: str | None = None

    model_config = ConfigDict(frozen=True)

    def has_next(self) -> bool:
        return self.continuation_token is not None

    def next_pageable(self) -> PageRequest | None:
        """Request for the following page, None on the last page."""
        if self.continuation_token is None:
            return None
        return self.pageable.next(self.continuation_token)

    def __len__(self) -> int:
        return len(self.content)

    def __iter__(self) -> Iterator[T]:  # type: ignore[override]
        return iter(self.content)
