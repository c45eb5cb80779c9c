"""Reusable page/limit pagination helpers."""

from __future__ import annotations

import math
from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.enums import SortOrderEnum
from backoffice.shared.exceptions import InvalidInputException

T = TypeVar("T")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class PaginationParams(BaseModel):
    """Page, limit and sort query params."""

    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort_by: str | None = None
    sort_order: SortOrderEnum = SortOrderEnum.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def validate_pagination(page: int, limit: int) -> None:
    """Reject out-of-range page or limit instead of clamping."""
    if page < 1:
        raise InvalidInputException("page must be >= 1")
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidInputException(f"limit must be between 1 and {MAX_LIMIT}")


def get_pagination_params(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_LIMIT),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: SortOrderEnum = Query(default=SortOrderEnum.DESC, alias="sortOrder"),
) -> PaginationParams:
    """FastAPI dependency for pagination params."""
    validate_pagination(page, limit)
    return PaginationParams(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def get_page_params(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_LIMIT),
    sort_by: str | None = Query(default=None, alias="sortBy", include_in_schema=False),
    sort_order: str | None = Query(default=None, alias="sortOrder", include_in_schema=False),
) -> PaginationParams:
    """Pagination for listings with a fixed order; sort params are rejected."""
    if sort_by is not None or sort_order is not None:
        raise InvalidInputException("This listing has a fixed order; sortBy and sortOrder are not supported")
    validate_pagination(page, limit)
    return PaginationParams(page=page, limit=limit)


class PageInfo(BaseModel):
    """Pagination block of a list response."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")


class Page(BaseModel, Generic[T]):
    """Generic paginated response."""

    data: list[T]
    pagination: PageInfo


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def build_page(items: list[T], total: int, params: PaginationParams) -> Page[T]:
    """Build page object from query result and params."""
    return Page(
        data=items,
        pagination=PageInfo(
            page=params.page,
            limit=params.limit,
            total=total,
            total_pages=total_pages(total, params.limit),
        ),
    )
