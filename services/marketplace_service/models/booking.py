"""Booking model: a buyer's reservation against an offer."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.marketplace_service.models.enums import (
    BookingStatus,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
    enum_values,
)
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# BOOKING MODELS
# ============================================================================

# Bookings that still hold units of the offer.
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(Base):
    """Reservations of offer units."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    offer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("offers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    seller_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(
            BookingStatus,
            values_callable=enum_values,
            name="booking_status_enum",
        ),
        default=BookingStatus.PENDING,
        server_default="pending",
    )

    pickup_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    pickup_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # Snapshot at booking time
    offer_title: Mapped[str] = mapped_column(String(100), nullable=False)

    # Cancellation
    cancellation_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cancelled_by: Mapped[Optional[CancelledBy]] = mapped_column(
        SAEnum(
            CancelledBy,
            values_callable=enum_values,
            name="booking_cancelled_by_enum",
        ),
        nullable=True,
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    confirmed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Payment
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            values_callable=enum_values,
            name="booking_payment_status_enum",
        ),
        default=PaymentStatus.PENDING,
        server_default="pending",
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            values_callable=enum_values,
            name="booking_payment_method_enum",
        ),
        default=PaymentMethod.CASH,
        server_default="cash",
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="booking_positive_quantity"),
        CheckConstraint("total_price >= 0", name="booking_positive_total"),
        Index("ix_bookings_user_id_status", "user_id", "status"),
        Index("ix_bookings_offer_id_status", "offer_id", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    def __repr__(self):
        return f"<Booking {self.pickup_code} status={self.status}>"
