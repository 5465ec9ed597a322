"""Review model: buyer feedback on a store or offer."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.marketplace_service.models.enums import ModerationStatus, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# REVIEW MODELS
# ============================================================================


class Review(Base):
    """Reviews tied to a completed booking."""

    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id", ondelete="CASCADE"), index=True, nullable=False
    )
    offer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("offers.id", ondelete="CASCADE"), index=True, nullable=True
    )
    # Null only for reviews written by admins
    booking_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    images: Mapped[list] = mapped_column(JSON, default=list)

    is_anonymous: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    helpful_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    # Moderation
    is_approved: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    is_flagged: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    admin_attention: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    moderation_status: Mapped[ModerationStatus] = mapped_column(
        SAEnum(
            ModerationStatus,
            values_callable=enum_values,
            name="review_moderation_status_enum",
        ),
        default=ModerationStatus.APPROVED,
        server_default="approved",
    )
    moderation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    moderation_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    moderated_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    moderated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # [{"user_id", "reason", "comment", "flagged_at"}]
    flags: Mapped[list] = mapped_column(JSON, default=list)
    flag_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    deleted_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    deleted_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Store owner response
    response_text: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    responded_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="review_rating_range"),
        UniqueConstraint("user_id", "booking_id", name="uq_review_user_booking"),
        Index("ix_reviews_store_id_is_deleted", "store_id", "is_deleted"),
    )

    def __repr__(self):
        return f"<Review {self.id} rating={self.rating}>"
