import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PaginationOptions(BaseModel):
    """1-based page options plus membership filters"""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    include_active: bool = True
    include_pending: bool = False
    include_removed: bool = False

    def clamped(self, max_page_size: int = MAX_PAGE_SIZE) -> "PaginationOptions":
        return self.model_copy(
            update={
                "page": max(1, self.page),
                "page_size": min(max(1, self.page_size), max_page_size),
            }
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginatedResult(BaseModel, Generic[T]):
    items: List[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0

    @classmethod
    def build(cls, items: List[T], total: int, options: PaginationOptions) -> "PaginatedResult[T]":
        return cls(
            items=items,
            total=total,
            page=options.page,
            page_size=options.page_size,
            total_pages=math.ceil(total / options.page_size),
        )
