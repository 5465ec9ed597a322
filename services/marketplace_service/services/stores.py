"""Store operations: onboarding, discovery, ownership checks and stats."""

import uuid
from typing import Optional

from fastapi import UploadFile
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.error_handler import BadRequestError, ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from libs.common.uploads import save_image_upload
from services.marketplace_service.models import (
    Booking,
    BookingStatus,
    BusinessCategory,
    DistanceUnit,
    Offer,
    Review,
    Store,
    UserRef,
    UserRole,
)
from services.marketplace_service.services import geo, ratings, stats
from services.marketplace_service.services.pagination import paginate
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

STORE_SORTS = {
    "rating": (Store.rating.desc(), Store.created_at.desc()),
    "newest": (Store.created_at.desc(),),
    "name": (Store.name.asc(),),
}


def _ensure_owner(actor: AuthUser, store: Store, action: str) -> None:
    if store.owner_id != actor.user_id and not actor.is_admin:
        raise ForbiddenError(f"User {actor.user_id} is not authorized to {action} this store")


async def get_store_or_404(db: AsyncSession, store_id: uuid.UUID) -> Store:
    store = await db.get(Store, store_id)
    if store is None:
        raise NotFoundError(f"No store with the id of {store_id}")
    return store


def parse_categories(raw: Optional[str]) -> list[BusinessCategory]:
    """Parse a comma-separated category filter, ignoring unknown values."""
    if not raw:
        return []
    valid = {c.value for c in BusinessCategory}
    return [
        BusinessCategory(part.strip())
        for part in raw.split(",")
        if part.strip() in valid
    ]


# ---------------------------------------------------------------------------
# Create / update / delete
# ---------------------------------------------------------------------------


async def create_store(db: AsyncSession, *, actor: AuthUser, data: dict) -> Store:
    """Open a store. Non-admins own at most one; buyers become sellers."""
    existing = await db.execute(
        select(Store.id).where(Store.owner_id == actor.user_id).limit(1)
    )
    if existing.first() is not None and not actor.is_admin:
        raise BadRequestError(f"The user with ID {actor.user_id} has already published a store")

    store = Store(owner_id=actor.user_id, **data)
    db.add(store)

    if actor.role == UserRole.USER.value:
        await db.execute(
            update(UserRef)
            .where(UserRef.id == actor.user_id)
            .values(role=UserRole.SELLER)
            .execution_options(synchronize_session=False)
        )

    await db.commit()
    logger.info("Store %s created by %s", store.id, actor.user_id)
    return store


async def update_store(
    db: AsyncSession, *, actor: AuthUser, store_id: uuid.UUID, changes: dict
) -> Store:
    store = await get_store_or_404(db, store_id)
    _ensure_owner(actor, store, "update")

    for field, value in changes.items():
        setattr(store, field, value)
    await db.commit()
    return store


async def count_active_offers(db: AsyncSession, store_id: uuid.UUID, *, bookable: bool = False) -> int:
    """Active offers whose pickup window is still open."""
    query = select(func.count(Offer.id)).where(
        Offer.store_id == store_id,
        Offer.is_active.is_(True),
        Offer.pickup_end > utc_now(),
    )
    if bookable:
        query = query.where(Offer.available_quantity > 0)
    return (await db.execute(query)).scalar_one()


async def delete_store(db: AsyncSession, *, actor: AuthUser, store_id: uuid.UUID) -> None:
    """Deactivate a store. Stores with running offers cannot be removed."""
    store = await get_store_or_404(db, store_id)
    _ensure_owner(actor, store, "delete")

    active_offers = await count_active_offers(db, store.id)
    if active_offers > 0:
        raise BadRequestError(
            f"Cannot delete store with {active_offers} active offers. "
            "Please deactivate or delete the offers first."
        )

    store.is_active = False
    await db.commit()
    logger.info("Store %s deactivated by %s", store.id, actor.user_id)


async def upload_store_photo(
    db: AsyncSession, *, actor: AuthUser, store_id: uuid.UUID, upload: UploadFile
) -> Store:
    store = await get_store_or_404(db, store_id)
    _ensure_owner(actor, store, "update")

    store.photo = await save_image_upload(upload, folder="stores", entity_id=store.id)
    await db.commit()
    return store


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


async def list_stores(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 10,
    category: Optional[BusinessCategory] = None,
) -> tuple[list[Store], int]:
    query = select(Store).where(Store.is_active.is_(True))
    if category is not None:
        query = query.where(Store.category == category)
    query = query.order_by(Store.created_at.desc())
    return await paginate(db, query, page=page, limit=limit)


async def search_stores(
    db: AsyncSession,
    *,
    q: Optional[str] = None,
    categories: Optional[list[BusinessCategory]] = None,
    city: Optional[str] = None,
    sort: str = "newest",
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Store], int]:
    query = select(Store).where(Store.is_active.is_(True))
    if q:
        pattern = f"%{q}%"
        query = query.where(
            or_(
                Store.name.ilike(pattern),
                Store.description.ilike(pattern),
                Store.address.ilike(pattern),
                Store.city.ilike(pattern),
            )
        )
    if categories:
        query = query.where(Store.category.in_(categories))
    if city:
        query = query.where(Store.city.ilike(f"%{city}%"))

    query = query.order_by(*STORE_SORTS.get(sort, STORE_SORTS["newest"]))
    return await paginate(db, query, page=page, limit=limit)


async def get_stores_in_radius(
    db: AsyncSession,
    *,
    lat: float,
    lng: float,
    distance: float,
    unit: DistanceUnit = DistanceUnit.KM,
) -> list[tuple[Store, float]]:
    """Active stores within ``distance``, nearest first."""
    result = await db.execute(
        select(Store).where(
            Store.is_active.is_(True),
            *geo.bounding_box_clause(Store, lat, lng, distance, unit),
        )
    )
    matches = geo.within_radius(result.scalars().all(), lat, lng, distance, unit)
    return sorted(matches, key=lambda pair: pair[1])


async def get_stores_by_owner(db: AsyncSession, owner_id: str) -> list[Store]:
    result = await db.execute(
        select(Store).where(Store.owner_id == owner_id).order_by(Store.created_at.desc())
    )
    return list(result.scalars().all())


async def get_store_detail(db: AsyncSession, store_id: uuid.UUID) -> dict:
    """Store plus live rating stats and its count of bookable offers."""
    store = await get_store_or_404(db, store_id)
    average, count = await ratings.rating_summary(db, store_id=store.id)
    return {
        "store": store,
        "stats": {"average_rating": average, "total_ratings": count},
        "active_offers": await count_active_offers(db, store.id, bookable=True),
    }


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


async def get_store_stats(db: AsyncSession, *, actor: AuthUser, store_id: uuid.UUID) -> dict:
    store = await get_store_or_404(db, store_id)
    _ensure_owner(actor, store, "view stats for")

    total_offers = (
        await db.execute(select(func.count(Offer.id)).where(Offer.store_id == store.id))
    ).scalar_one()
    total_bookings = (
        await db.execute(select(func.count(Booking.id)).where(Booking.store_id == store.id))
    ).scalar_one()
    completed_bookings = (
        await db.execute(
            select(func.count(Booking.id)).where(
                Booking.store_id == store.id,
                Booking.status == BookingStatus.COMPLETED,
            )
        )
    ).scalar_one()

    average, count = await ratings.rating_summary(db, store_id=store.id)
    recent = await db.execute(
        select(Review)
        .where(Review.store_id == store.id, Review.is_deleted.is_(False))
        .order_by(Review.created_at.desc())
        .limit(10)
    )

    booking_count = func.count(Booking.id)
    top_offers = await db.execute(
        select(
            Offer.id,
            Offer.title,
            booking_count,
            func.coalesce(func.sum(Booking.total_price), 0),
        )
        .outerjoin(Booking, Booking.offer_id == Offer.id)
        .where(Offer.store_id == store.id)
        .group_by(Offer.id, Offer.title)
        .order_by(booking_count.desc())
        .limit(5)
    )

    return {
        "total_offers": total_offers,
        "active_offers": await count_active_offers(db, store.id, bookable=True),
        "total_bookings": total_bookings,
        "completed_bookings": completed_bookings,
        "monthly_bookings": await stats.monthly_bookings(db, Booking.store_id == store.id),
        "rating_stats": {
            "average_rating": average,
            "total_ratings": count,
            "recent": [
                {
                    "rating": review.rating,
                    "comment": review.comment,
                    "user_id": None if review.is_anonymous else review.user_id,
                    "created_at": review.created_at,
                }
                for review in recent.scalars().all()
            ],
        },
        "top_selling_offers": [
            {
                "offer_id": offer_id,
                "title": title,
                "bookings_count": bookings_count,
                "total_revenue": stats.money(revenue),
            }
            for offer_id, title, bookings_count, revenue in top_offers.all()
        ],
    }


async def get_review_stats(db: AsyncSession, store_id: uuid.UUID) -> dict:
    await get_store_or_404(db, store_id)
    return await ratings.review_distribution(db, store_id)
