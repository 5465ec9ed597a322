"""Rating aggregation for stores and offers.

Ratings count only reviews that are live (not soft-deleted) and approved.
"""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.marketplace_service.models import Offer, Review, Store
from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _counted_reviews():
    return (Review.is_deleted.is_(False), Review.is_approved.is_(True))


async def rating_summary(db: AsyncSession, *, store_id=None, offer_id=None) -> tuple[float, int]:
    """Return ``(average, count)`` for a store or offer; ``(0, 0)`` when unrated."""
    query = select(func.avg(Review.rating), func.count(Review.id)).where(*_counted_reviews())
    if store_id is not None:
        query = query.where(Review.store_id == store_id)
    if offer_id is not None:
        query = query.where(Review.offer_id == offer_id)

    average, count = (await db.execute(query)).one()
    if not count:
        return 0.0, 0
    return round(float(average), 1), count


async def recalculate_store_rating(db: AsyncSession, store_id: uuid.UUID) -> tuple[float, int]:
    average, count = await rating_summary(db, store_id=store_id)
    await db.execute(
        update(Store)
        .where(Store.id == store_id)
        .values(rating=average, rating_count=count)
        .execution_options(synchronize_session=False)
    )
    logger.info("Store %s rating -> %.1f (%d reviews)", store_id, average, count)
    return average, count


async def recalculate_offer_rating(db: AsyncSession, offer_id: uuid.UUID) -> tuple[float, int]:
    average, count = await rating_summary(db, offer_id=offer_id)
    await db.execute(
        update(Offer)
        .where(Offer.id == offer_id)
        .values(rating=average, rating_count=count)
        .execution_options(synchronize_session=False)
    )
    logger.info("Offer %s rating -> %.1f (%d reviews)", offer_id, average, count)
    return average, count


async def recalculate_ratings(
    db: AsyncSession, *, store_id: uuid.UUID, offer_id: Optional[uuid.UUID] = None
) -> None:
    """Refresh the store aggregate and, when given, the offer aggregate."""
    await recalculate_store_rating(db, store_id)
    if offer_id is not None:
        await recalculate_offer_rating(db, offer_id)


async def review_distribution(db: AsyncSession, store_id: uuid.UUID) -> dict:
    """Star histogram and counters over the reviews that count toward the rating."""
    live = (Review.store_id == store_id, *_counted_reviews())
    star_columns = [
        func.coalesce(func.sum(case((Review.rating == star, 1), else_=0)), 0)
        for star in range(1, 6)
    ]
    row = (
        await db.execute(
            select(func.count(Review.id), func.avg(Review.rating), *star_columns).where(*live)
        )
    ).one()
    total, average = row[0], row[1]

    with_comment = (
        await db.execute(
            select(func.count(Review.id)).where(
                *live, Review.comment.is_not(None), Review.comment != ""
            )
        )
    ).scalar_one()

    # images is a JSON list; emptiness is checked in Python for portability
    image_rows = (await db.execute(select(Review.images).where(*live))).scalars().all()
    with_images = sum(1 for images in image_rows if images)

    return {
        "total": total,
        "average_rating": round(float(average), 1) if average is not None else 0.0,
        "distribution": {str(star): int(row[1 + star]) for star in range(1, 6)},
        "with_comment": with_comment,
        "with_images": with_images,
    }
