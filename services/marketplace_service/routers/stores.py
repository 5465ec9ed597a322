"""Store router: onboarding, discovery, photos and seller stats."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.marketplace_service.models import BusinessCategory, DistanceUnit
from services.marketplace_service.routers._helpers import PageParams, page_params, paged
from services.marketplace_service.schemas import (
    MessageResponse,
    ReviewStatsResponse,
    StoreCreate,
    StoreDetailResponse,
    StoreListResponse,
    StoreResponse,
    StoreStatsResponse,
    StoreUpdate,
    StoreWithDistance,
)
from services.marketplace_service.services import stores as store_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["stores"])


# ============================================================================
# DISCOVERY
# ============================================================================


@router.get("/stores", response_model=StoreListResponse)
async def list_stores(
    category: Optional[BusinessCategory] = None,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_async_db),
):
    """List active stores, newest first."""
    items, total = await store_ops.list_stores(
        db, page=params.page, limit=params.limit, category=category
    )
    return paged(items, total, params)


@router.get("/stores/search", response_model=StoreListResponse)
async def search_stores(
    q: Optional[str] = None,
    category: Optional[str] = Query(None, description="Comma-separated categories"),
    city: Optional[str] = None,
    sort: str = Query("newest", pattern="^(rating|newest|name)$"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_async_db),
):
    items, total = await store_ops.search_stores(
        db,
        q=q,
        categories=store_ops.parse_categories(category),
        city=city,
        sort=sort,
        page=params.page,
        limit=params.limit,
    )
    return paged(items, total, params)


@router.get("/stores/radius", response_model=list[StoreWithDistance])
async def get_stores_in_radius(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    distance: float = Query(..., gt=0),
    unit: DistanceUnit = DistanceUnit.KM,
    db: AsyncSession = Depends(get_async_db),
):
    """Active stores within ``distance`` of a point, nearest first."""
    matches = await store_ops.get_stores_in_radius(
        db, lat=lat, lng=lng, distance=distance, unit=unit
    )
    return [
        StoreWithDistance(
            **StoreResponse.model_validate(store).model_dump(),
            distance=round(d, 3),
        )
        for store, d in matches
    ]


@router.get("/stores/category/{category}", response_model=StoreListResponse)
async def get_stores_by_category(
    category: BusinessCategory,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_async_db),
):
    items, total = await store_ops.list_stores(
        db, page=params.page, limit=params.limit, category=category
    )
    return paged(items, total, params)


@router.get("/stores/owner/{owner_id}", response_model=list[StoreResponse])
async def get_stores_by_owner(
    owner_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    return await store_ops.get_stores_by_owner(db, owner_id)


@router.get("/stores/{store_id}", response_model=StoreDetailResponse)
async def get_store(
    store_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    """Store with live rating stats and its bookable offer count."""
    detail = await store_ops.get_store_detail(db, store_id)
    return StoreDetailResponse(
        **StoreResponse.model_validate(detail["store"]).model_dump(),
        stats=detail["stats"],
        active_offers=detail["active_offers"],
    )


# ============================================================================
# OWNER ACTIONS
# ============================================================================


@router.post("/stores", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    payload: StoreCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    data = payload.model_dump(mode="json", exclude_none=True)
    return await store_ops.create_store(db, actor=current_user, data=data)


@router.put("/stores/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: uuid.UUID,
    payload: StoreUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    changes = payload.model_dump(mode="json", exclude_unset=True)
    return await store_ops.update_store(
        db, actor=current_user, store_id=store_id, changes=changes
    )


@router.delete("/stores/{store_id}", response_model=MessageResponse)
async def delete_store(
    store_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await store_ops.delete_store(db, actor=current_user, store_id=store_id)
    return {"message": "Store deactivated"}


@router.put("/stores/{store_id}/photo", response_model=StoreResponse)
async def upload_store_photo(
    store_id: uuid.UUID,
    file: UploadFile = File(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await store_ops.upload_store_photo(
        db, actor=current_user, store_id=store_id, upload=file
    )


# ============================================================================
# STATS
# ============================================================================


@router.get("/stores/{store_id}/stats", response_model=StoreStatsResponse)
async def get_store_stats(
    store_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await store_ops.get_store_stats(db, actor=current_user, store_id=store_id)


@router.get("/stores/{store_id}/review-stats", response_model=ReviewStatsResponse)
async def get_review_stats(
    store_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await store_ops.get_review_stats(db, store_id)
