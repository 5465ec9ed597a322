"""Booking lifecycle: reservation, status transitions, pickup codes, stats.

Inventory moves with the booking state:

* creating a booking reserves units;
* ``cancelled`` / ``rejected`` and deleting a ``pending`` booking release them;
* ``completed`` / ``expired`` keep them consumed.
"""

import uuid
from decimal import Decimal
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.error_handler import BadRequestError, ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from services.marketplace_service.models import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
    BookingStatus,
    CancelledBy,
    NotificationPriority,
    NotificationType,
    Offer,
    PaymentMethod,
    RelatedEntityType,
    Store,
    UserRole,
)
from services.marketplace_service.services import inventory, stats
from services.marketplace_service.services.notifications import queue_notification
from services.marketplace_service.services.pagination import paginate
from services.marketplace_service.services.pickup_codes import (
    generate_unique_pickup_code,
    normalize_pickup_code,
)
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.REJECTED}
    ),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.EXPIRED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
}

# Transitions only the seller (or an admin) may perform.
SELLER_TRANSITIONS = frozenset(
    {BookingStatus.CONFIRMED, BookingStatus.REJECTED, BookingStatus.COMPLETED}
)

# Transitions that hand reserved units back to the offer.
RELEASING_TRANSITIONS = frozenset({BookingStatus.CANCELLED, BookingStatus.REJECTED})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _is_buyer(actor: AuthUser, booking: Booking) -> bool:
    return booking.user_id == actor.user_id


def _is_seller(actor: AuthUser, booking: Booking) -> bool:
    return booking.seller_id == actor.user_id


def _cancelled_by(actor: AuthUser, booking: Booking) -> CancelledBy:
    if actor.is_admin:
        return CancelledBy.ADMIN
    if _is_buyer(actor, booking):
        return CancelledBy.USER
    return CancelledBy.SELLER


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def _get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError(f"No booking with the id of {booking_id}")
    return booking


async def get_booking(
    db: AsyncSession, *, actor: AuthUser, booking_id: uuid.UUID
) -> Booking:
    """Fetch a booking visible to its buyer, its seller or an admin."""
    booking = await _get_booking_or_404(db, booking_id)
    if not (_is_buyer(actor, booking) or _is_seller(actor, booking) or actor.is_admin):
        raise ForbiddenError(f"User {actor.user_id} is not authorized to view this booking")
    return booking


async def list_bookings(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 25,
    status: Optional[BookingStatus] = None,
) -> tuple[list[Booking], int]:
    query = select(Booking)
    if status is not None:
        query = query.where(Booking.status == status)
    query = query.order_by(Booking.created_at.desc())
    return await paginate(db, query, page=page, limit=limit)


async def list_offer_bookings(
    db: AsyncSession, *, actor: AuthUser, offer_id: uuid.UUID
) -> list[Booking]:
    offer = await db.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError(f"No offer with the id of {offer_id}")
    if offer.seller_id != actor.user_id and not actor.is_admin:
        raise ForbiddenError(
            f"User {actor.user_id} is not authorized to view bookings for this offer"
        )
    result = await db.execute(
        select(Booking)
        .where(Booking.offer_id == offer_id)
        .order_by(Booking.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user_bookings(
    db: AsyncSession, *, actor: AuthUser, user_id: str
) -> list[Booking]:
    if user_id != actor.user_id and not actor.is_admin:
        raise ForbiddenError(f"User {actor.user_id} is not authorized to view these bookings")
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc())
    )
    return list(result.scalars().all())


async def get_seller_bookings(
    db: AsyncSession, *, actor: AuthUser, seller_id: str
) -> list[Booking]:
    if seller_id != actor.user_id and not actor.is_admin:
        raise ForbiddenError(f"User {actor.user_id} is not authorized to view these bookings")
    result = await db.execute(
        select(Booking)
        .where(Booking.seller_id == seller_id)
        .order_by(Booking.created_at.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession,
    *,
    actor: AuthUser,
    offer_id: uuid.UUID,
    quantity: int = 1,
    payment_method: PaymentMethod = PaymentMethod.CASH,
) -> Booking:
    """Reserve ``quantity`` units of an offer for the acting user."""
    offer = await db.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError(f"No offer with the id of {offer_id}")

    if not offer.is_active or offer.available_quantity <= 0:
        raise BadRequestError("This offer is no longer available")
    if offer.pickup_end <= utc_now():
        raise BadRequestError("The pickup time for this offer has passed")
    if offer.seller_id == actor.user_id:
        raise BadRequestError("You cannot book your own offer")

    existing = await db.execute(
        select(Booking.id).where(
            Booking.offer_id == offer_id,
            Booking.user_id == actor.user_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    if existing.first() is not None:
        raise BadRequestError("You already have a booking for this offer")

    if quantity > offer.available_quantity:
        raise BadRequestError(
            f"Only {offer.available_quantity} item(s) available for this offer"
        )

    pickup_code = await generate_unique_pickup_code(db)

    # The conditional decrement decides; the check above only shapes the message.
    if not await inventory.reserve_units(db, offer_id=offer.id, quantity=quantity):
        raise BadRequestError("Not enough items available for this offer")

    booking = Booking(
        offer_id=offer.id,
        store_id=offer.store_id,
        user_id=actor.user_id,
        seller_id=offer.seller_id,
        quantity=quantity,
        total_price=Decimal(offer.discounted_price) * quantity,
        pickup_code=pickup_code,
        pickup_time=offer.pickup_start,
        offer_title=offer.title,
        payment_method=payment_method,
    )
    db.add(booking)
    await db.flush()

    queue_notification(
        db,
        user_id=offer.seller_id,
        title="New Booking",
        message=f"You have a new booking for {offer.title}",
        type=NotificationType.BOOKING_CREATED,
        priority=NotificationPriority.HIGH,
        related_entity_type=RelatedEntityType.BOOKING,
        related_entity_id=booking.id,
    )

    await db.commit()
    await db.refresh(offer)

    logger.info(
        "Booking %s created: %d x offer %s by user %s (%d left)",
        booking.id,
        quantity,
        offer.id,
        actor.user_id,
        offer.available_quantity,
    )
    return booking


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


async def _apply_transition(
    db: AsyncSession,
    booking: Booking,
    target: BookingStatus,
    *,
    actor: AuthUser,
    reason: Optional[str] = None,
) -> None:
    """Mutate ``booking`` into ``target`` with its side effects. No commit."""
    now = utc_now()
    previous = booking.status
    booking.status = target

    if target == BookingStatus.CONFIRMED:
        booking.confirmed_at = now
        queue_notification(
            db,
            user_id=booking.user_id,
            title="Booking Confirmed",
            message=f"Your booking for {booking.offer_title} has been confirmed",
            type=NotificationType.BOOKING_CONFIRMED,
            priority=NotificationPriority.HIGH,
            related_entity_type=RelatedEntityType.BOOKING,
            related_entity_id=booking.id,
        )

    elif target in RELEASING_TRANSITIONS:
        booking.cancelled_at = now
        booking.cancelled_by = _cancelled_by(actor, booking)
        if reason:
            booking.cancellation_reason = reason
        await inventory.release_units(
            db, offer_id=booking.offer_id, quantity=booking.quantity
        )

        # Tell whoever did not make the change.
        recipient = booking.seller_id if _is_buyer(actor, booking) else booking.user_id
        label = "rejected" if target == BookingStatus.REJECTED else "cancelled"
        queue_notification(
            db,
            user_id=recipient,
            title=f"Booking {label.capitalize()}",
            message=f"The booking for {booking.offer_title} has been {label}",
            type=NotificationType.BOOKING_CANCELLED,
            priority=NotificationPriority.HIGH,
            related_entity_type=RelatedEntityType.BOOKING,
            related_entity_id=booking.id,
        )

    elif target == BookingStatus.COMPLETED:
        booking.completed_at = now
        queue_notification(
            db,
            user_id=booking.user_id,
            title="Order Picked Up",
            message=(
                f"Your order for {booking.offer_title} has been marked as picked up. "
                "Thank you for saving food!"
            ),
            type=NotificationType.BOOKING_COMPLETED,
            priority=NotificationPriority.MEDIUM,
            related_entity_type=RelatedEntityType.BOOKING,
            related_entity_id=booking.id,
        )

    logger.info(
        "Booking %s: %s -> %s by %s",
        booking.id,
        previous.value,
        target.value,
        actor.user_id,
    )


async def update_booking_status(
    db: AsyncSession,
    *,
    actor: AuthUser,
    booking_id: uuid.UUID,
    status: BookingStatus,
    reason: Optional[str] = None,
) -> Booking:
    booking = await _get_booking_or_404(db, booking_id)

    is_party = _is_buyer(actor, booking) or _is_seller(actor, booking)
    if not (is_party or actor.is_admin):
        raise ForbiddenError(
            f"User {actor.user_id} is not authorized to update this booking"
        )

    if not can_transition(booking.status, status):
        raise BadRequestError(
            f"Invalid status transition from {booking.status.value} to {status.value}"
        )

    if status in SELLER_TRANSITIONS and not (_is_seller(actor, booking) or actor.is_admin):
        raise ForbiddenError(f"Only the seller can mark a booking as {status.value}")

    await _apply_transition(db, booking, status, actor=actor, reason=reason)
    await db.commit()
    return booking


async def delete_booking(
    db: AsyncSession, *, actor: AuthUser, booking_id: uuid.UUID
) -> None:
    """Remove a pending or cancelled booking; pending units go back on sale."""
    booking = await _get_booking_or_404(db, booking_id)

    if not (_is_buyer(actor, booking) or _is_seller(actor, booking) or actor.is_admin):
        raise ForbiddenError(
            f"User {actor.user_id} is not authorized to delete this booking"
        )
    if booking.status not in (BookingStatus.PENDING, BookingStatus.CANCELLED):
        raise BadRequestError(f"Cannot delete a booking with status {booking.status.value}")

    if booking.status == BookingStatus.PENDING:
        await inventory.release_units(
            db, offer_id=booking.offer_id, quantity=booking.quantity
        )

    await db.delete(booking)
    await db.commit()
    logger.info("Booking %s deleted by %s", booking_id, actor.user_id)


# ---------------------------------------------------------------------------
# Pickup codes
# ---------------------------------------------------------------------------


async def _find_by_pickup_code(db: AsyncSession, *, actor: AuthUser, code: str) -> Booking:
    result = await db.execute(
        select(Booking).where(
            Booking.pickup_code == normalize_pickup_code(code),
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Invalid or expired pickup code")
    if not _is_seller(actor, booking):
        raise ForbiddenError("You are not authorized to verify this code")
    return booking


async def verify_pickup_code(db: AsyncSession, *, actor: AuthUser, code: str) -> Booking:
    return await _find_by_pickup_code(db, actor=actor, code=code)


async def complete_booking_with_code(
    db: AsyncSession, *, actor: AuthUser, code: str
) -> Booking:
    booking = await _find_by_pickup_code(db, actor=actor, code=code)
    await _apply_transition(db, booking, BookingStatus.COMPLETED, actor=actor)
    await db.commit()
    return booking


# ---------------------------------------------------------------------------
# Housekeeping
# ---------------------------------------------------------------------------


async def expire_overdue_bookings(db: AsyncSession) -> int:
    """Move active bookings whose pickup window has closed to ``expired``."""
    now = utc_now()
    overdue_offers = select(Offer.id).where(Offer.pickup_end < now)
    result = await db.execute(
        update(Booking)
        .where(
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.offer_id.in_(overdue_offers),
        )
        .values(
            status=BookingStatus.EXPIRED,
            cancelled_by=CancelledBy.SYSTEM,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info("Expired %d overdue booking(s)", result.rowcount)
    return result.rowcount


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


async def _owns_store(db: AsyncSession, user_id: str) -> bool:
    # Tokens issued before a store was opened still carry the "user" role.
    result = await db.execute(select(Store.id).where(Store.owner_id == user_id).limit(1))
    return result.first() is not None


async def get_booking_stats(db: AsyncSession, *, actor: AuthUser) -> dict:
    """Admins see every booking, sellers see their own."""
    if actor.is_admin:
        filters = ()
    elif actor.role == UserRole.SELLER.value or await _owns_store(db, actor.user_id):
        filters = (Booking.seller_id == actor.user_id,)
    else:
        raise ForbiddenError("Not authorized to view booking stats")

    return {
        "by_status": await stats.bookings_by_status(db, *filters),
        "totals": await stats.booking_totals(db, *filters),
        "monthly": await stats.monthly_bookings(db, *filters),
    }
