from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

from skillswap.core.config import get_settings

T = TypeVar("T")


class Pagination(BaseModel):
    current: int = Field(..., ge=1, description="Current page (1-based)")
    pages: int = Field(..., ge=0, description="Total number of pages")
    total: int = Field(..., ge=0, description="Total number of matching items")
    limit: int = Field(..., ge=1, description="Page size")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(current=page, pages=ceil(total / limit) if total else 0, total=total, limit=limit)


class Page(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


def _default_page_size() -> int:
    return get_settings().default_page_size


class PageRequest(BaseModel):
    """Page selection. Size defaults and bounds come from the runtime settings."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default_factory=_default_page_size, ge=1)

    @field_validator("limit", mode="after")
    @classmethod
    def _cap_limit(cls, value: int) -> int:
        max_page_size = get_settings().max_page_size
        if value > max_page_size:
            raise ValueError(f"Page size cannot exceed {max_page_size}")
        return value

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
