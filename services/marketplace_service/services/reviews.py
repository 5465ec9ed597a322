"""Review operations: authoring, owner responses, flagging and moderation.

Every change that can move a rating (create, rating edit, delete,
moderation) recomputes the store and offer aggregates in the same
transaction.
"""

import uuid
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.error_handler import BadRequestError, ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from services.marketplace_service.models import (
    Booking,
    BookingStatus,
    ModerationAction,
    ModerationStatus,
    NotificationPriority,
    NotificationType,
    Offer,
    RelatedEntityType,
    Review,
    Store,
)
from services.marketplace_service.services import ratings
from services.marketplace_service.services.notifications import (
    notify_admins,
    queue_notification,
)
from services.marketplace_service.services.pagination import paginate
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

EDITABLE_FIELDS = ("rating", "comment", "images", "is_anonymous")


def _live():
    return Review.is_deleted.is_(False)


async def get_review_or_404(db: AsyncSession, review_id: uuid.UUID) -> Review:
    review = await db.get(Review, review_id)
    if review is None or review.is_deleted:
        raise NotFoundError(f"No review found with the id of {review_id}")
    return review


def _ensure_author(actor: AuthUser, review: Review, action: str) -> None:
    if review.user_id != actor.user_id and not actor.is_admin:
        raise ForbiddenError(f"User {actor.user_id} is not authorized to {action} this review")


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------


async def _reviewable_booking(
    db: AsyncSession, *, actor: AuthUser, target_filter, target_label: str
) -> Optional[Booking]:
    """Pick a completed booking of the user's that has not been reviewed yet.

    Admins may review without one, in which case None is returned.
    """
    result = await db.execute(
        select(Booking)
        .where(
            Booking.user_id == actor.user_id,
            Booking.status == BookingStatus.COMPLETED,
            target_filter,
        )
        .order_by(Booking.completed_at.desc())
    )
    completed = result.scalars().all()
    if not completed:
        if actor.is_admin:
            return None
        raise ForbiddenError(
            f"User {actor.user_id} is not authorized to add a review for this {target_label}"
        )

    reviewed = await db.execute(
        select(Review.booking_id).where(
            Review.user_id == actor.user_id,
            Review.booking_id.in_([b.id for b in completed]),
        )
    )
    reviewed_ids = set(reviewed.scalars().all())
    for booking in completed:
        if booking.id not in reviewed_ids:
            return booking
    raise BadRequestError(f"User {actor.user_id} has already reviewed this {target_label}")


def _review_from(data: dict, **fields) -> Review:
    return Review(
        rating=data["rating"],
        comment=data.get("comment"),
        images=data.get("images") or [],
        is_anonymous=data.get("is_anonymous", False),
        **fields,
    )


async def add_store_review(
    db: AsyncSession, *, actor: AuthUser, store_id: uuid.UUID, data: dict
) -> Review:
    store = await db.get(Store, store_id)
    if store is None:
        raise NotFoundError(f"No store with the id of {store_id}")

    booking = await _reviewable_booking(
        db, actor=actor, target_filter=Booking.store_id == store.id, target_label="store"
    )
    review = _review_from(
        data,
        user_id=actor.user_id,
        store_id=store.id,
        booking_id=booking.id if booking else None,
    )
    db.add(review)
    await db.flush()

    await ratings.recalculate_store_rating(db, store.id)
    queue_notification(
        db,
        user_id=store.owner_id,
        title="New Review Received",
        message=f"You have received a new {review.rating}-star review for your store",
        type=NotificationType.NEW_REVIEW,
        related_entity_type=RelatedEntityType.REVIEW,
        related_entity_id=review.id,
    )
    await db.commit()
    logger.info("Review %s added to store %s by %s", review.id, store.id, actor.user_id)
    return review


async def add_offer_review(
    db: AsyncSession, *, actor: AuthUser, offer_id: uuid.UUID, data: dict
) -> Review:
    offer = await db.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError(f"No offer with the id of {offer_id}")

    booking = await _reviewable_booking(
        db, actor=actor, target_filter=Booking.offer_id == offer.id, target_label="offer"
    )
    review = _review_from(
        data,
        user_id=actor.user_id,
        store_id=offer.store_id,
        offer_id=offer.id,
        booking_id=booking.id if booking else None,
    )
    db.add(review)
    await db.flush()

    await ratings.recalculate_ratings(db, store_id=offer.store_id, offer_id=offer.id)
    queue_notification(
        db,
        user_id=offer.seller_id,
        title="New Review Received",
        message=(
            f'You have received a new {review.rating}-star review for your offer "{offer.title}"'
        ),
        type=NotificationType.NEW_REVIEW,
        related_entity_type=RelatedEntityType.REVIEW,
        related_entity_id=review.id,
    )
    await db.commit()
    logger.info("Review %s added to offer %s by %s", review.id, offer.id, actor.user_id)
    return review


async def update_review(
    db: AsyncSession, *, actor: AuthUser, review_id: uuid.UUID, changes: dict
) -> Review:
    review = await get_review_or_404(db, review_id)
    _ensure_author(actor, review, "update")

    rating_changed = "rating" in changes and changes["rating"] != review.rating
    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(review, field, changes[field])
    await db.flush()

    if rating_changed:
        await ratings.recalculate_ratings(db, store_id=review.store_id, offer_id=review.offer_id)
    await db.commit()
    return review


async def delete_review(
    db: AsyncSession,
    *,
    actor: AuthUser,
    review_id: uuid.UUID,
    reason: Optional[str] = None,
) -> None:
    review = await get_review_or_404(db, review_id)
    _ensure_author(actor, review, "delete")

    review.is_deleted = True
    review.deleted_at = utc_now()
    review.deleted_by = actor.user_id
    review.deleted_reason = reason
    await db.flush()

    await ratings.recalculate_ratings(db, store_id=review.store_id, offer_id=review.offer_id)
    await db.commit()
    logger.info("Review %s deleted by %s", review.id, actor.user_id)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


async def list_reviews(
    db: AsyncSession, *, page: int = 1, limit: int = 10
) -> tuple[list[Review], int]:
    query = select(Review).where(_live()).order_by(Review.created_at.desc())
    return await paginate(db, query, page=page, limit=limit)


async def get_store_reviews(db: AsyncSession, store_id: uuid.UUID) -> list[Review]:
    if await db.get(Store, store_id) is None:
        raise NotFoundError(f"No store with the id of {store_id}")
    result = await db.execute(
        select(Review)
        .where(Review.store_id == store_id, _live())
        .order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())


async def get_offer_reviews(db: AsyncSession, offer_id: uuid.UUID) -> list[Review]:
    if await db.get(Offer, offer_id) is None:
        raise NotFoundError(f"No offer with the id of {offer_id}")
    result = await db.execute(
        select(Review)
        .where(Review.offer_id == offer_id, _live())
        .order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user_reviews(db: AsyncSession, user_id: str) -> list[Review]:
    result = await db.execute(
        select(Review)
        .where(Review.user_id == user_id, _live())
        .order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------


async def respond_to_review(
    db: AsyncSession, *, actor: AuthUser, review_id: uuid.UUID, text: str
) -> Review:
    """Store owner's public reply."""
    review = await get_review_or_404(db, review_id)
    store = await db.get(Store, review.store_id)
    if (store is None or store.owner_id != actor.user_id) and not actor.is_admin:
        raise ForbiddenError(f"User {actor.user_id} is not authorized to respond to this review")

    review.response_text = text
    review.responded_by = actor.user_id
    review.responded_at = utc_now()
    await db.commit()
    return review


async def mark_review_helpful(db: AsyncSession, review_id: uuid.UUID) -> Review:
    review = await get_review_or_404(db, review_id)
    await db.execute(
        update(Review)
        .where(Review.id == review.id)
        .values(helpful_count=Review.helpful_count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(review)
    return review


async def flag_review(
    db: AsyncSession,
    *,
    actor: AuthUser,
    review_id: uuid.UUID,
    reason: str,
    comment: Optional[str] = None,
) -> Review:
    if not reason or not reason.strip():
        raise BadRequestError("Please provide a reason for flagging this review")

    review = await get_review_or_404(db, review_id)
    flags = list(review.flags or [])
    if any(flag.get("user_id") == actor.user_id for flag in flags):
        raise BadRequestError("You have already flagged this review")

    flags.append(
        {
            "user_id": actor.user_id,
            "reason": reason,
            "comment": comment,
            "flagged_at": utc_now().isoformat(),
        }
    )
    review.flags = flags
    review.flag_count = len(flags)

    threshold = get_settings().REVIEW_FLAG_THRESHOLD
    if review.flag_count >= threshold and not review.admin_attention:
        review.is_flagged = True
        review.admin_attention = True
        alerted = await notify_admins(
            db,
            title="Review Flagged",
            message="A review has been flagged multiple times and requires attention.",
            related_entity_type=RelatedEntityType.REVIEW,
            related_entity_id=review.id,
            metadata={"flag_count": review.flag_count},
        )
        logger.warning(
            "Review %s reached %d flags; alerted %d admin(s)",
            review.id,
            review.flag_count,
            alerted,
        )

    await db.commit()
    return review


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------


async def get_reviews_for_moderation(
    db: AsyncSession, *, page: int = 1, limit: int = 20
) -> tuple[list[Review], int]:
    query = (
        select(Review)
        .where(
            _live(),
            or_(
                Review.is_approved.is_(False),
                Review.is_flagged.is_(True),
                Review.admin_attention.is_(True),
            ),
        )
        .order_by(Review.flag_count.desc(), Review.created_at.desc())
    )
    return await paginate(db, query, page=page, limit=limit)


async def moderate_review(
    db: AsyncSession,
    *,
    actor: AuthUser,
    review_id: uuid.UUID,
    action: ModerationAction,
    reason: Optional[str] = None,
    message: Optional[str] = None,
) -> Review:
    review = await get_review_or_404(db, review_id)
    now = utc_now()

    if action == ModerationAction.APPROVE:
        review.is_approved = True
        review.is_flagged = False
        review.admin_attention = False
        review.moderation_status = ModerationStatus.APPROVED
        author_message = None
    elif action == ModerationAction.REJECT:
        if not reason:
            raise BadRequestError("Please provide a reason for rejection")
        review.is_approved = False
        review.is_flagged = False
        review.admin_attention = False
        review.moderation_status = ModerationStatus.REJECTED
        review.moderation_reason = reason
        author_message = f"Your review has been rejected. Reason: {reason}"
    else:
        if not message:
            raise BadRequestError("Please provide a message to the user")
        review.admin_attention = True
        review.moderation_status = ModerationStatus.CHANGES_REQUESTED
        review.moderation_message = message
        author_message = (
            f"The moderator has requested changes to your review. Message: {message}"
        )

    review.moderated_by = actor.user_id
    review.moderated_at = now
    await db.flush()

    await ratings.recalculate_ratings(db, store_id=review.store_id, offer_id=review.offer_id)
    if author_message:
        queue_notification(
            db,
            user_id=review.user_id,
            title="Review Update",
            message=author_message,
            type=NotificationType.ACCOUNT_ALERT,
            priority=NotificationPriority.MEDIUM,
            related_entity_type=RelatedEntityType.REVIEW,
            related_entity_id=review.id,
        )
    await db.commit()
    logger.info("Review %s moderated (%s) by %s", review.id, action.value, actor.user_id)
    return review
