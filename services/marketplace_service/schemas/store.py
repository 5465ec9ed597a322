"""Store schemas."""

import re
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator
from services.marketplace_service.models import BusinessCategory
from services.marketplace_service.schemas.common import PartialUpdate

PHONE_PATTERN = re.compile(r"^(\+213|0)[5-7][0-9]{8}$")
TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


class OpeningHours(BaseModel):
    open: str = Field(..., pattern=TIME_PATTERN)
    close: str = Field(..., pattern=TIME_PATTERN)


def _validate_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError("Please add a valid Algerian phone number")
    return value


# ============================================================================
# STORE SCHEMAS
# ============================================================================


class StoreBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    category: BusinessCategory
    phone: str
    email: Optional[EmailStr] = None
    website: Optional[HttpUrl] = None
    address: str = Field(..., min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    opening_hours: dict[str, OpeningHours] = Field(default_factory=dict)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _validate_phone(v)


class StoreCreate(StoreBase):
    logo: Optional[str] = None
    cover_image: Optional[str] = None


class StoreUpdate(PartialUpdate):
    required_columns = frozenset(
        {
            "name",
            "description",
            "category",
            "phone",
            "address",
            "opening_hours",
            "logo",
            "cover_image",
            "is_active",
        }
    )

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[BusinessCategory] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[HttpUrl] = None
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    opening_hours: Optional[dict[str, OpeningHours]] = None
    logo: Optional[str] = None
    cover_image: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _validate_phone(v)


class StoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    name: str
    description: str
    category: BusinessCategory
    phone: str
    email: Optional[str] = None
    website: Optional[str] = None
    address: str
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    logo: str
    cover_image: str
    photo: Optional[str] = None
    opening_hours: dict = {}
    rating: float
    rating_count: int
    is_verified: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class StoreListResponse(BaseModel):
    """Paginated store list."""

    items: list[StoreResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class StoreWithDistance(StoreResponse):
    distance: float


class StoreRatingStats(BaseModel):
    average_rating: float
    total_ratings: int


class StoreDetailResponse(StoreResponse):
    stats: StoreRatingStats
    active_offers: int


# ============================================================================
# STATS SCHEMAS
# ============================================================================


class MonthlyBookings(BaseModel):
    year: int
    month: int
    count: int
    revenue: Decimal


class RecentRating(BaseModel):
    rating: int
    comment: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime


class StoreRatingSummary(StoreRatingStats):
    recent: list[RecentRating] = []


class TopSellingOffer(BaseModel):
    offer_id: uuid.UUID
    title: str
    bookings_count: int
    total_revenue: Decimal


class StoreStatsResponse(BaseModel):
    total_offers: int
    active_offers: int
    total_bookings: int
    completed_bookings: int
    monthly_bookings: list[MonthlyBookings]
    rating_stats: StoreRatingSummary
    top_selling_offers: list[TopSellingOffer]


class ReviewStatsResponse(BaseModel):
    total: int
    average_rating: float
    distribution: dict[str, int]
    with_comment: int
    with_images: int
