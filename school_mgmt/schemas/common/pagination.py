from math import ceil

from pydantic import BaseModel, Field

from school_mgmt.core.config import settings


class PaginationParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, params: PaginationParams) -> "PageMeta":
        return cls(
            total=total,
            page=params.page,
            limit=params.limit,
            pages=ceil(total / params.limit) if total else 0
        )


class IdRequest(BaseModel):
    """Operations addressing a single record by id."""
    id: int = Field(..., ge=1)
