"""Store model: a seller's place of business."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.marketplace_service.models.enums import BusinessCategory, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# STORE MODELS
# ============================================================================


class Store(Base):
    """Stores listed on the marketplace."""

    __tablename__ = "stores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[BusinessCategory] = mapped_column(
        SAEnum(
            BusinessCategory,
            values_callable=enum_values,
            name="business_category_enum",
        ),
        nullable=False,
    )

    # Contact
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Location
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Media
    logo: Mapped[str] = mapped_column(
        String(255), default="no-photo.jpg", server_default="no-photo.jpg"
    )
    cover_image: Mapped[str] = mapped_column(
        String(255), default="no-cover.jpg", server_default="no-cover.jpg"
    )
    photo: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # {"monday": {"open": "08:00", "close": "18:00"}, ...}
    opening_hours: Mapped[dict] = mapped_column(JSON, default=dict)

    # Aggregated from live, approved reviews
    rating: Mapped[float] = mapped_column(Float, default=0, server_default="0")
    rating_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    is_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="store_rating_range"),
        Index("ix_stores_location", "latitude", "longitude"),
    )

    def __repr__(self):
        return f"<Store {self.name}>"
