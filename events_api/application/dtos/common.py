"""Shared response shapes"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int


class Page(BaseModel, Generic[T]):
    """Collection envelope: ``{data: [...], meta: {page, limit, total}}``"""

    data: List[T]
    meta: PaginationMeta


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
