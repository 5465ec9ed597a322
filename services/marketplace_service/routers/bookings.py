"""Booking router: reservations, status changes and pickup-code handoff."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.rate_limit import write_limit
from libs.db.session import get_async_db
from services.marketplace_service.models import BookingStatus
from services.marketplace_service.routers._helpers import PageParams, page_params, paged
from services.marketplace_service.schemas import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatsResponse,
    BookingStatusUpdate,
    MessageResponse,
)
from services.marketplace_service.services import bookings as booking_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["bookings"])


# ============================================================================
# BUYER ACTIONS
# ============================================================================


@router.post(
    "/offers/{offer_id}/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
@write_limit
async def create_booking(
    request: Request,
    offer_id: uuid.UUID,
    payload: BookingCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Reserve units of an offer. Returns the booking with its pickup code."""
    return await booking_ops.create_booking(
        db,
        actor=current_user,
        offer_id=offer_id,
        quantity=payload.quantity,
        payment_method=payload.payment_method,
    )


@router.get("/offers/{offer_id}/bookings", response_model=list[BookingResponse])
async def list_offer_bookings(
    offer_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.list_offer_bookings(db, actor=current_user, offer_id=offer_id)


# ============================================================================
# LISTINGS
# ============================================================================


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    params: PageParams = Depends(page_params),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All bookings (admin only)."""
    items, total = await booking_ops.list_bookings(
        db, page=params.page, limit=params.limit, status=status_filter
    )
    return paged(items, total, params)


@router.get("/bookings/stats", response_model=BookingStatsResponse)
async def get_booking_stats(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.get_booking_stats(db, actor=current_user)


@router.get("/bookings/user/{user_id}", response_model=list[BookingResponse])
async def get_user_bookings(
    user_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.get_user_bookings(db, actor=current_user, user_id=user_id)


@router.get("/bookings/seller/{seller_id}", response_model=list[BookingResponse])
async def get_seller_bookings(
    seller_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.get_seller_bookings(
        db, actor=current_user, seller_id=seller_id
    )


# ============================================================================
# PICKUP CODES
# ============================================================================


@router.get("/bookings/verify/{code}", response_model=BookingResponse)
async def verify_pickup_code(
    code: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Seller checks a code presented at pickup."""
    return await booking_ops.verify_pickup_code(db, actor=current_user, code=code)


@router.put("/bookings/complete/{code}", response_model=BookingResponse)
async def complete_booking_with_code(
    code: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.complete_booking_with_code(
        db, actor=current_user, code=code
    )


# ============================================================================
# SINGLE BOOKING
# ============================================================================


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.get_booking(db, actor=current_user, booking_id=booking_id)


@router.put("/bookings/{booking_id}", response_model=BookingResponse)
async def update_booking_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await booking_ops.update_booking_status(
        db,
        actor=current_user,
        booking_id=booking_id,
        status=payload.status,
        reason=payload.cancellation_reason,
    )


@router.delete("/bookings/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await booking_ops.delete_booking(db, actor=current_user, booking_id=booking_id)
    return {"message": "Booking deleted"}
