"""Review router: buyer reviews, owner responses, flags and moderation."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user, require_roles
from libs.auth.models import ROLE_ADMIN, ROLE_MODERATOR, AuthUser
from libs.db.session import get_async_db
from services.marketplace_service.routers._helpers import PageParams, page_params, paged
from services.marketplace_service.schemas import (
    MessageResponse,
    ModerationQueueResponse,
    ReviewCreate,
    ReviewDelete,
    ReviewFlag,
    ReviewListResponse,
    ReviewModerate,
    ReviewModerationResponse,
    ReviewRespond,
    ReviewResponse,
    ReviewUpdate,
)
from services.marketplace_service.services import reviews as review_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["reviews"])

require_moderator = require_roles(ROLE_ADMIN, ROLE_MODERATOR)


# ============================================================================
# AUTHORING
# ============================================================================


@router.post(
    "/stores/{store_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_store_review(
    store_id: uuid.UUID,
    payload: ReviewCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.add_store_review(
        db, actor=current_user, store_id=store_id, data=payload.model_dump()
    )


@router.post(
    "/offers/{offer_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_offer_review(
    offer_id: uuid.UUID,
    payload: ReviewCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.add_offer_review(
        db, actor=current_user, offer_id=offer_id, data=payload.model_dump()
    )


# ============================================================================
# READING
# ============================================================================


@router.get("/reviews", response_model=ReviewListResponse)
async def list_reviews(
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_async_db),
):
    items, total = await review_ops.list_reviews(db, page=params.page, limit=params.limit)
    return paged(items, total, params)


@router.get("/reviews/me", response_model=list[ReviewResponse])
async def get_my_reviews(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.get_user_reviews(db, current_user.user_id)


@router.get("/reviews/moderation", response_model=ModerationQueueResponse)
async def get_reviews_for_moderation(
    params: PageParams = Depends(page_params),
    _moderator: AuthUser = Depends(require_moderator),
    db: AsyncSession = Depends(get_async_db),
):
    """Reviews that are unapproved, flagged or waiting on a moderator."""
    items, total = await review_ops.get_reviews_for_moderation(
        db, page=params.page, limit=params.limit
    )
    return paged(items, total, params)


@router.get("/reviews/user/{user_id}", response_model=list[ReviewResponse])
async def get_user_reviews(
    user_id: str,
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.get_user_reviews(db, user_id)


@router.get("/stores/{store_id}/reviews", response_model=list[ReviewResponse])
async def get_store_reviews(
    store_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.get_store_reviews(db, store_id)


@router.get("/offers/{offer_id}/reviews", response_model=list[ReviewResponse])
async def get_offer_reviews(
    offer_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.get_offer_reviews(db, offer_id)


@router.get("/reviews/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.get_review_or_404(db, review_id)


# ============================================================================
# CHANGES
# ============================================================================


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: uuid.UUID,
    payload: ReviewUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.update_review(
        db,
        actor=current_user,
        review_id=review_id,
        changes=payload.model_dump(exclude_unset=True),
    )


@router.delete("/reviews/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: uuid.UUID,
    payload: ReviewDelete | None = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await review_ops.delete_review(
        db,
        actor=current_user,
        review_id=review_id,
        reason=payload.reason if payload else None,
    )
    return {"message": "Review deleted"}


@router.post("/reviews/{review_id}/respond", response_model=ReviewResponse)
async def respond_to_review(
    review_id: uuid.UUID,
    payload: ReviewRespond,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.respond_to_review(
        db, actor=current_user, review_id=review_id, text=payload.text
    )


@router.put("/reviews/{review_id}/helpful", response_model=ReviewResponse)
async def mark_review_helpful(
    review_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.mark_review_helpful(db, review_id)


@router.post("/reviews/{review_id}/flag", response_model=ReviewResponse)
async def flag_review(
    review_id: uuid.UUID,
    payload: ReviewFlag,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.flag_review(
        db,
        actor=current_user,
        review_id=review_id,
        reason=payload.reason,
        comment=payload.comment,
    )


@router.put("/reviews/{review_id}/moderate", response_model=ReviewModerationResponse)
async def moderate_review(
    review_id: uuid.UUID,
    payload: ReviewModerate,
    moderator: AuthUser = Depends(require_moderator),
    db: AsyncSession = Depends(get_async_db),
):
    return await review_ops.moderate_review(
        db,
        actor=moderator,
        review_id=review_id,
        action=payload.action,
        reason=payload.reason,
        message=payload.message,
    )
