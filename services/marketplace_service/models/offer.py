"""Offer model: surplus food inventory listed by a store."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.marketplace_service.models.enums import BusinessCategory, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# OFFER MODELS
# ============================================================================


class Offer(Base):
    """Surplus-food listings.

    ``quantity`` is the number of units originally put up for sale;
    ``available_quantity`` is what is left after live reservations.
    """

    __tablename__ = "offers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id", ondelete="CASCADE"), index=True, nullable=False
    )
    seller_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[BusinessCategory] = mapped_column(
        SAEnum(
            BusinessCategory,
            values_callable=enum_values,
            name="business_category_enum",
        ),
        nullable=False,
    )

    # Pricing
    original_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discounted_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Stock
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Pickup window
    pickup_start: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    pickup_end: Mapped[datetime] = mapped_column(UTCDateTime(), index=True, nullable=False)

    images: Mapped[list] = mapped_column(JSON, default=list)

    # Location (defaults to the store's)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")

    rating: Mapped[float] = mapped_column(Float, default=0, server_default="0")
    rating_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="offer_positive_quantity"),
        CheckConstraint(
            "available_quantity >= 0 AND available_quantity <= quantity",
            name="offer_valid_available",
        ),
        CheckConstraint("original_price >= 0", name="offer_positive_price"),
        CheckConstraint(
            "discounted_price < original_price", name="offer_discount_below_price"
        ),
        CheckConstraint("pickup_end > pickup_start", name="offer_pickup_window"),
        Index("ix_offers_location", "latitude", "longitude"),
        Index("ix_offers_active_pickup_end", "is_active", "pickup_end"),
    )

    @property
    def discount_percentage(self) -> int:
        if not self.original_price:
            return 0
        return int(
            round(
                (self.original_price - self.discounted_price)
                / self.original_price
                * 100
            )
        )

    def __repr__(self):
        return f"<Offer {self.title} {self.available_quantity}/{self.quantity}>"
