"""Offer operations: listing surplus food, discovery and inventory edits."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import UploadFile
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.error_handler import BadRequestError, ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from libs.common.uploads import save_image_upload
from services.marketplace_service.models import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingStatus,
    BusinessCategory,
    CancelledBy,
    DistanceUnit,
    NotificationPriority,
    NotificationType,
    Offer,
    RelatedEntityType,
    Review,
    Store,
)
from services.marketplace_service.services import geo, ratings
from services.marketplace_service.services.notifications import queue_notification
from services.marketplace_service.services.pagination import paginate
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

OFFER_SORTS = {
    "newest": (Offer.created_at.desc(),),
    "oldest": (Offer.created_at.asc(),),
    "priceLow": (Offer.discounted_price.asc(),),
    "priceHigh": (Offer.discounted_price.desc(),),
    "rating": (Offer.rating.desc(), Offer.created_at.desc()),
    "pickup": (Offer.pickup_start.asc(),),
}

OFFER_DELETED_REASON = "Offer was deleted by the seller"


def bookable_clause():
    """Offers a buyer can still reserve right now."""
    return (
        Offer.is_active.is_(True),
        Offer.available_quantity > 0,
        Offer.pickup_end > utc_now(),
    )


def validate_offer_invariants(
    *,
    original_price: Decimal,
    discounted_price: Decimal,
    pickup_start,
    pickup_end,
) -> None:
    if original_price < 0:
        raise BadRequestError("Original price cannot be negative")
    if discounted_price >= original_price:
        raise BadRequestError("Discounted price must be less than original price")
    if pickup_end <= pickup_start:
        raise BadRequestError("Pickup end time must be after pickup start time")


async def get_offer_or_404(db: AsyncSession, offer_id: uuid.UUID) -> Offer:
    offer = await db.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError(f"No offer with the id of {offer_id}")
    return offer


def _ensure_seller(actor: AuthUser, offer: Offer, action: str) -> None:
    if offer.seller_id != actor.user_id and not actor.is_admin:
        raise ForbiddenError(f"User {actor.user_id} is not authorized to {action} this offer")


# ---------------------------------------------------------------------------
# Create / update / delete
# ---------------------------------------------------------------------------


async def create_offer(
    db: AsyncSession, *, actor: AuthUser, store_id: uuid.UUID, data: dict
) -> Offer:
    """List a new offer under one of the acting seller's stores."""
    result = await db.execute(
        select(Store).where(Store.id == store_id, Store.owner_id == actor.user_id)
    )
    store = result.scalar_one_or_none()
    if store is None:
        raise NotFoundError(f"No store found with id of {store_id}")

    validate_offer_invariants(
        original_price=data["original_price"],
        discounted_price=data["discounted_price"],
        pickup_start=data["pickup_start"],
        pickup_end=data["pickup_end"],
    )

    offer = Offer(
        store_id=store.id,
        seller_id=actor.user_id,
        available_quantity=data["quantity"],
        **data,
    )
    for field in ("address", "city", "latitude", "longitude"):
        if getattr(offer, field) is None:
            setattr(offer, field, getattr(store, field))
    db.add(offer)
    await db.flush()

    queue_notification(
        db,
        user_id=actor.user_id,
        title="New Offer Available!",
        message=f'A new offer "{offer.title}" has been added to {store.name}',
        type=NotificationType.NEW_OFFER,
        priority=NotificationPriority.HIGH,
        related_entity_type=RelatedEntityType.OFFER,
        related_entity_id=offer.id,
        action_url=f"/offers/{offer.id}",
        expires_at=offer.pickup_end,
    )

    await db.commit()
    logger.info("Offer %s created in store %s (%d units)", offer.id, store.id, offer.quantity)
    return offer


async def update_offer(
    db: AsyncSession, *, actor: AuthUser, offer_id: uuid.UUID, changes: dict
) -> Offer:
    offer = await get_offer_or_404(db, offer_id)
    _ensure_seller(actor, offer, "update")

    validate_offer_invariants(
        original_price=changes.get("original_price", offer.original_price),
        discounted_price=changes.get("discounted_price", offer.discounted_price),
        pickup_start=changes.get("pickup_start", offer.pickup_start),
        pickup_end=changes.get("pickup_end", offer.pickup_end),
    )

    new_quantity = changes.pop("quantity", None)
    if new_quantity is not None and new_quantity != offer.quantity:
        shifted = offer.available_quantity + (new_quantity - offer.quantity)
        offer.available_quantity = max(0, min(shifted, new_quantity))
        offer.quantity = new_quantity

    for field, value in changes.items():
        setattr(offer, field, value)
    await db.commit()
    return offer


async def delete_offer(db: AsyncSession, *, actor: AuthUser, offer_id: uuid.UUID) -> None:
    """Remove an offer with its bookings and reviews.

    Buyers holding live bookings are told the offer is gone first.
    """
    offer = await get_offer_or_404(db, offer_id)
    _ensure_seller(actor, offer, "delete")

    cancelled_by = CancelledBy.ADMIN if actor.is_admin else CancelledBy.SELLER
    result = await db.execute(
        select(Booking).where(
            Booking.offer_id == offer.id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    now = utc_now()
    active_bookings = result.scalars().all()
    for booking in active_bookings:
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_by = cancelled_by
        booking.cancelled_at = now
        booking.cancellation_reason = OFFER_DELETED_REASON
        queue_notification(
            db,
            user_id=booking.user_id,
            title="Booking Cancelled",
            message=f'Your booking for "{offer.title}" was cancelled because the offer was removed',
            type=NotificationType.BOOKING_CANCELLED,
            priority=NotificationPriority.HIGH,
            related_entity_type=RelatedEntityType.BOOKING,
            related_entity_id=booking.id,
        )
    await db.flush()

    store_id = offer.store_id
    await db.execute(delete(Review).where(Review.offer_id == offer.id))
    await db.execute(delete(Booking).where(Booking.offer_id == offer.id))
    await db.delete(offer)
    await db.flush()

    await ratings.recalculate_store_rating(db, store_id)
    await db.commit()
    logger.info(
        "Offer %s deleted by %s (%d booking(s) cancelled)",
        offer_id,
        actor.user_id,
        len(active_bookings),
    )


async def upload_offer_photo(
    db: AsyncSession, *, actor: AuthUser, offer_id: uuid.UUID, upload: UploadFile
) -> Offer:
    offer = await get_offer_or_404(db, offer_id)
    _ensure_seller(actor, offer, "update")

    max_images = get_settings().MAX_OFFER_IMAGES
    if len(offer.images or []) >= max_images:
        raise BadRequestError(f"An offer can have at most {max_images} images")

    path = await save_image_upload(
        upload, folder="offers", entity_id=f"{offer.id}_{len(offer.images or [])}"
    )
    offer.images = [*(offer.images or []), path]
    await db.commit()
    return offer


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


async def list_offers(
    db: AsyncSession, *, page: int = 1, limit: int = 10
) -> tuple[list[Offer], int]:
    query = select(Offer).order_by(Offer.created_at.desc())
    return await paginate(db, query, page=page, limit=limit)


async def get_nearby_offers(
    db: AsyncSession,
    *,
    lat: float,
    lng: float,
    distance: float,
    unit: DistanceUnit = DistanceUnit.KM,
) -> list[Offer]:
    result = await db.execute(
        select(Offer)
        .where(*bookable_clause(), *geo.bounding_box_clause(Offer, lat, lng, distance, unit))
        .order_by(Offer.created_at.desc())
    )
    return [offer for offer, _ in geo.within_radius(result.scalars().all(), lat, lng, distance, unit)]


async def get_featured_offers(db: AsyncSession) -> list[Offer]:
    result = await db.execute(
        select(Offer)
        .where(*bookable_clause())
        .order_by(Offer.rating.desc(), Offer.created_at.desc())
        .limit(10)
    )
    return list(result.scalars().all())


async def search_offers(
    db: AsyncSession,
    *,
    q: Optional[str] = None,
    categories: Optional[list[BusinessCategory]] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    distance: float = 10,
    unit: DistanceUnit = DistanceUnit.KM,
    sort: str = "newest",
) -> list[Offer]:
    query = select(Offer).where(*bookable_clause())
    if q:
        pattern = f"%{q}%"
        store_match = select(Store.id).where(Store.name.ilike(pattern))
        query = query.where(
            or_(
                Offer.title.ilike(pattern),
                Offer.description.ilike(pattern),
                Offer.store_id.in_(store_match),
            )
        )
    if categories:
        query = query.where(Offer.category.in_(categories))
    if min_price is not None:
        query = query.where(Offer.discounted_price >= min_price)
    if max_price is not None:
        query = query.where(Offer.discounted_price <= max_price)

    located = lat is not None and lng is not None
    if located:
        query = query.where(*geo.bounding_box_clause(Offer, lat, lng, distance, unit))

    query = query.order_by(*OFFER_SORTS.get(sort, OFFER_SORTS["newest"]))
    offers = list((await db.execute(query)).scalars().all())
    if located:
        offers = [offer for offer, _ in geo.within_radius(offers, lat, lng, distance, unit)]
    return offers


async def get_similar_offers(db: AsyncSession, offer_id: uuid.UUID) -> list[Offer]:
    """Up to four bookable offers of the same category nearby, nearest first."""
    offer = await get_offer_or_404(db, offer_id)
    if offer.latitude is None or offer.longitude is None:
        return []

    radius = get_settings().SIMILAR_OFFERS_RADIUS_KM
    result = await db.execute(
        select(Offer).where(
            Offer.id != offer.id,
            Offer.category == offer.category,
            *bookable_clause(),
            *geo.bounding_box_clause(Offer, offer.latitude, offer.longitude, radius, DistanceUnit.KM),
        )
    )
    nearby = geo.within_radius(
        result.scalars().all(), offer.latitude, offer.longitude, radius, DistanceUnit.KM
    )
    nearby.sort(key=lambda pair: pair[1])
    return [candidate for candidate, _ in nearby[:4]]


async def get_offers_by_store(db: AsyncSession, store_id: uuid.UUID) -> list[Offer]:
    store = await db.get(Store, store_id)
    if store is None:
        raise NotFoundError(f"No store with the id of {store_id}")
    result = await db.execute(
        select(Offer).where(Offer.store_id == store_id).order_by(Offer.created_at.desc())
    )
    return list(result.scalars().all())


async def get_offers_by_seller(db: AsyncSession, seller_id: str) -> list[Offer]:
    result = await db.execute(
        select(Offer).where(Offer.seller_id == seller_id).order_by(Offer.created_at.desc())
    )
    return list(result.scalars().all())
