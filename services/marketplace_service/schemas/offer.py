"""Offer schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.marketplace_service.models import BusinessCategory
from services.marketplace_service.schemas.common import PartialUpdate, UTCDatetime

# ============================================================================
# OFFER SCHEMAS
# ============================================================================


class OfferCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    category: BusinessCategory
    original_price: Decimal = Field(..., ge=0, decimal_places=2)
    discounted_price: Decimal = Field(..., ge=0, decimal_places=2)
    quantity: int = Field(..., ge=1)
    pickup_start: UTCDatetime
    pickup_end: UTCDatetime
    images: list[str] = Field(default_factory=list, max_length=5)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    is_active: bool = True

    @model_validator(mode="after")
    def check_price_and_window(self):
        if self.discounted_price >= self.original_price:
            raise ValueError("Discounted price must be less than original price")
        if self.pickup_end <= self.pickup_start:
            raise ValueError("Pickup end time must be after pickup start time")
        return self


class OfferUpdate(PartialUpdate):
    """Partial update. Cross-field rules are checked against stored values."""

    required_columns = frozenset(
        {
            "title",
            "description",
            "category",
            "original_price",
            "discounted_price",
            "quantity",
            "pickup_start",
            "pickup_end",
            "is_active",
        }
    )

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[BusinessCategory] = None
    original_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    discounted_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    quantity: Optional[int] = Field(None, ge=1)
    pickup_start: Optional[UTCDatetime] = None
    pickup_end: Optional[UTCDatetime] = None
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    is_active: Optional[bool] = None


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    store_id: uuid.UUID
    seller_id: str
    title: str
    description: str
    category: BusinessCategory
    original_price: Decimal
    discounted_price: Decimal
    discount_percentage: int
    quantity: int
    available_quantity: int
    pickup_start: datetime
    pickup_end: datetime
    images: list[str] = []
    address: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_active: bool
    rating: float
    rating_count: int
    created_at: datetime
    updated_at: datetime


class OfferListResponse(BaseModel):
    """Paginated offer list."""

    items: list[OfferResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
