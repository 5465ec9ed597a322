"""Booking schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.marketplace_service.models import (
    BookingStatus,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
)

# ============================================================================
# BOOKING SCHEMAS
# ============================================================================


class BookingCreate(BaseModel):
    quantity: int = Field(1, ge=1)
    payment_method: PaymentMethod = PaymentMethod.CASH


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    cancellation_reason: Optional[str] = Field(None, max_length=500)


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    offer_id: uuid.UUID
    store_id: uuid.UUID
    user_id: str
    seller_id: str
    offer_title: str
    quantity: int
    total_price: Decimal
    status: BookingStatus
    pickup_code: str
    pickup_time: datetime
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[CancelledBy] = None
    cancelled_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Paginated booking list."""

    items: list[BookingResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


# ============================================================================
# STATS SCHEMAS
# ============================================================================


class BookingStatusStats(BaseModel):
    status: BookingStatus
    count: int
    total_revenue: Decimal
    avg_quantity: float
    min_price: Decimal
    max_price: Decimal


class BookingTotals(BaseModel):
    total_bookings: int
    total_revenue: Decimal
    completed_bookings: int
    cancelled_bookings: int


class BookingMonthlyStats(BaseModel):
    year: int
    month: int
    count: int
    revenue: Decimal


class BookingStatsResponse(BaseModel):
    by_status: list[BookingStatusStats]
    totals: BookingTotals
    monthly: list[BookingMonthlyStats]


class ExpireBookingsResponse(BaseModel):
    expired: int
