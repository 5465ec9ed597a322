"""Shared dependencies and helper functions for marketplace routers."""

from dataclasses import dataclass

from fastapi import Query
from services.marketplace_service.services.pagination import total_pages


@dataclass
class PageParams:
    page: int
    limit: int


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def paged(items, total: int, params: PageParams, **extra) -> dict:
    """Build the ``items/total/page/page_size/total_pages`` envelope."""
    return {
        "items": items,
        "total": total,
        "page": params.page,
        "page_size": params.limit,
        "total_pages": total_pages(total, params.limit),
        **extra,
    }
