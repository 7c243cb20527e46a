"""Pydantic schemas for request pagination and response page info."""
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PaginationMode = Literal["offset", "cursor"]


class OffsetPagination(BaseModel):
    """Page-number/page-size addressing, optionally zero-based."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["offset"] = "offset"
    page: int = Field(default=1, ge=0)
    page_size: int = Field(default=20, ge=1)
    zero_based: bool = False

    @property
    def first_page(self) -> int:
        return 0 if self.zero_based else 1

    def rewind(self) -> "OffsetPagination":
        """Same page size and numbering, first page."""
        return OffsetPagination(
            page=self.first_page, page_size=self.page_size, zero_based=self.zero_based,
        )

    def to_wire(self) -> dict[str, Any]:
        query: dict[str, Any] = {"page": self.page, "page_size": self.page_size}
        if self.zero_based:
            query["zero_based"] = True
        return query


class CursorPagination(BaseModel):
    """Opaque forward-only cursor addressing."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cursor"] = "cursor"
    cursor: str | None = None
    limit: int | None = Field(default=None, ge=1)

    def rewind(self) -> "CursorPagination":
        """Same limit, no cursor (the first page)."""
        return CursorPagination(limit=self.limit)

    def to_wire(self) -> dict[str, Any]:
        query: dict[str, Any] = {}
        if self.cursor is not None:
            query["cursor"] = self.cursor
        if self.limit is not None:
            query["limit"] = self.limit
        return query


Pagination = Annotated[OffsetPagination | CursorPagination, Field(discriminator="kind")]


class _PageInfo(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class OffsetPaginationInfo(_PageInfo):
    """Page info returned for offset-paginated responses."""

    kind: Literal["OffsetPaginationInfo"] = Field(default="OffsetPaginationInfo", alias="__kind")
    current_page: int
    total_pages: int
    page_size: int
    page_offset: int = 0
    zero_based: bool = False

    @property
    def mode(self) -> PaginationMode:
        return "offset"


class CursorPaginationInfo(_PageInfo):
    """Page info returned for cursor-paginated responses."""

    kind: Literal["CursorPaginationInfo"] = Field(default="CursorPaginationInfo", alias="__kind")
    current_cursor: str
    next_cursor: str | None = None

    @property
    def mode(self) -> PaginationMode:
        return "cursor"


PageInfo = OffsetPaginationInfo | CursorPaginationInfo

PAGE_INFO_MODELS: dict[str, type[OffsetPaginationInfo] | type[CursorPaginationInfo]] = {
    "OffsetPaginationInfo": OffsetPaginationInfo,
    "CursorPaginationInfo": CursorPaginationInfo,
}


class PageResponse(BaseModel):
    """A page of nodes plus the page info describing where it sits."""

    model_config = ConfigDict(frozen=True)

    nodes: list[Any] = Field(default_factory=list)
    page_info: OffsetPaginationInfo | CursorPaginationInfo
