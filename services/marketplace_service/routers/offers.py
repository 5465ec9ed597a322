"""Offer router: listing, discovery and seller management of offers."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.marketplace_service.models import DistanceUnit
from services.marketplace_service.routers._helpers import PageParams, page_params, paged
from services.marketplace_service.schemas import (
    MessageResponse,
    OfferCreate,
    OfferListResponse,
    OfferResponse,
    OfferUpdate,
)
from services.marketplace_service.services import offers as offer_ops
from services.marketplace_service.services.stores import parse_categories
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["offers"])


# ============================================================================
# DISCOVERY
# ============================================================================


@router.get("/offers", response_model=OfferListResponse)
async def list_offers(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_async_db),
):
    items, total = await offer_ops.list_offers(db, page=params.page, limit=params.limit)
    return paged(items, total, params)


@router.get("/offers/nearby", response_model=list[OfferResponse])
async def get_nearby_offers(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    distance: float = Query(10, gt=0),
    unit: DistanceUnit = DistanceUnit.KM,
    db: AsyncSession = Depends(get_async_db),
):
    """Bookable offers within ``distance`` of a point, newest first."""
    return await offer_ops.get_nearby_offers(
        db, lat=lat, lng=lng, distance=distance, unit=unit
    )


@router.get("/offers/featured", response_model=list[OfferResponse])
async def get_featured_offers(db: AsyncSession = Depends(get_async_db)):
    return await offer_ops.get_featured_offers(db)


@router.get("/offers/search", response_model=list[OfferResponse])
async def search_offers(
    q: Optional[str] = None,
    category: Optional[str] = Query(None, description="Comma-separated categories"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    distance: float = Query(10, gt=0),
    unit: DistanceUnit = DistanceUnit.KM,
    sort: str = Query(
        "newest", pattern="^(newest|oldest|priceLow|priceHigh|rating|pickup)$"
    ),
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.search_offers(
        db,
        q=q,
        categories=parse_categories(category),
        min_price=min_price,
        max_price=max_price,
        lat=lat,
        lng=lng,
        distance=distance,
        unit=unit,
        sort=sort,
    )


@router.get("/offers/seller/{seller_id}", response_model=list[OfferResponse])
async def get_offers_by_seller(
    seller_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.get_offers_by_seller(db, seller_id)


@router.get("/stores/{store_id}/offers", response_model=list[OfferResponse])
async def get_offers_by_store(
    store_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.get_offers_by_store(db, store_id)


@router.get("/offers/{offer_id}", response_model=OfferResponse)
async def get_offer(
    offer_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.get_offer_or_404(db, offer_id)


@router.get("/offers/{offer_id}/similar", response_model=list[OfferResponse])
async def get_similar_offers(
    offer_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.get_similar_offers(db, offer_id)


# ============================================================================
# SELLER ACTIONS
# ============================================================================


@router.post(
    "/stores/{store_id}/offers",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_offer(
    store_id: uuid.UUID,
    payload: OfferCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.create_offer(
        db, actor=current_user, store_id=store_id, data=payload.model_dump()
    )


@router.put("/offers/{offer_id}", response_model=OfferResponse)
async def update_offer(
    offer_id: uuid.UUID,
    payload: OfferUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.update_offer(
        db,
        actor=current_user,
        offer_id=offer_id,
        changes=payload.model_dump(exclude_unset=True),
    )


@router.delete("/offers/{offer_id}", response_model=MessageResponse)
async def delete_offer(
    offer_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await offer_ops.delete_offer(db, actor=current_user, offer_id=offer_id)
    return {"message": "Offer deleted"}


@router.put("/offers/{offer_id}/photo", response_model=OfferResponse)
async def upload_offer_photo(
    offer_id: uuid.UUID,
    file: UploadFile = File(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await offer_ops.upload_offer_photo(
        db, actor=current_user, offer_id=offer_id, upload=file
    )
