"""Offset pagination over SQLAlchemy selects."""

import math
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(
    db: AsyncSession, query: Select, *, page: int, limit: int
) -> tuple[list[Any], int]:
    """Run ``query`` for one page. Returns ``(rows, total)``."""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
