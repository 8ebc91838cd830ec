"""
Pagination request and result schemas.

`PageRequest` describes which slice of the result the caller wants and in
which order; `Page` is what the pagination engine hands back.
"""

import math
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Annotated

from member_search.constants import MAX_PAGE_SIZE, SORTABLE_FIELDS

T = TypeVar("T")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NullsOrder(str, Enum):
    FIRST = "first"
    LAST = "last"


class SortKey(BaseModel):  # type: ignore[misc]
    """
    One ORDER BY term.

    Attributes:
        field: Projection field to sort by (see SORTABLE_FIELDS).
        direction: Ascending or descending.
        nulls: Explicit null placement; None keeps the database default.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    direction: Direction = Direction.ASC
    nulls: NullsOrder | None = None

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        """Only projection columns may be sorted on."""
        if v not in SORTABLE_FIELDS:
            raise ValueError(
                f"Cannot sort by '{v}', expected one of {sorted(SORTABLE_FIELDS)}"
            )
        return v

    @classmethod
    def asc(cls, field: str, nulls: NullsOrder | str | None = None) -> "SortKey":
        return cls(field=field, direction=Direction.ASC, nulls=nulls)

    @classmethod
    def desc(cls, field: str, nulls: NullsOrder | str | None = None) -> "SortKey":
        return cls(field=field, direction=Direction.DESC, nulls=nulls)


class PageRequest(BaseModel):  # type: ignore[misc]
    """
    Offset/limit request with ordered sort keys.

    Example:
        >>> # Third page of 10, oldest members first
        >>> PageRequest.of(2, 10, SortKey.desc("age"))
        PageRequest(offset=20, page_size=10, sort=(...))
    """

    model_config = ConfigDict(frozen=True)

    offset: Annotated[int, Field(ge=0)] = 0
    page_size: Annotated[int, Field(ge=1, le=MAX_PAGE_SIZE)]
    sort: tuple[SortKey, ...] = ()

    @classmethod
    def of(cls, page: int, size: int, *sort: SortKey) -> "PageRequest":
        """
        Build a request for a 0-indexed page number.

        Args:
            page: Page number, starting at 0.
            size: Number of items per page.
            *sort: Sort keys in priority order.

        Returns:
            The equivalent offset-based request.
        """
        return cls(offset=page * size, page_size=size, sort=sort)


class Page(BaseModel, Generic[T]):  # type: ignore[misc]
    """
    One page of search results.

    `total_elements` is exact when the count query ran; when the count
    was elided it equals `offset + len(content)`, which is exact too
    because the page was provably the last one.
    """

    content: list[T]
    total_elements: Annotated[int, Field(ge=0)]
    page_size: Annotated[int, Field(ge=1)]
    offset: Annotated[int, Field(ge=0)]

    @model_validator(mode="after")
    def check_bounds(self) -> "Page[T]":
        if len(self.content) > self.page_size:
            raise ValueError(
                f"Page holds {len(self.content)} items but page_size is {self.page_size}"
            )
        if self.total_elements < self.offset + len(self.content):
            raise ValueError(
                f"total_elements={self.total_elements} is smaller than "
                f"offset + len(content)={self.offset + len(self.content)}"
            )
        return self

    @property
    def number(self) -> int:
        """0-indexed page number."""
        return self.offset // self.page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.offset + len(self.content) < self.total_elements

    @property
    def is_first(self) -> bool:
        return self.offset == 0

    @property
    def is_last(self) -> bool:
        return not self.has_next
