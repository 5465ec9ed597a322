"""Notification router: the current user's inbox and channel preferences."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.marketplace_service.routers._helpers import PageParams, paged
from services.marketplace_service.schemas import (
    ClearNotificationsResponse,
    LatestNotificationsResponse,
    MarkReadRequest,
    MarkReadResponse,
    NotificationListResponse,
    NotificationPreferences,
    NotificationPreferencesUpdate,
    NotificationResponse,
    TestNotificationRequest,
    UnreadCountResponse,
)
from services.marketplace_service.services import notifications as notification_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    is_read: Optional[bool] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    items, total, unread = await notification_ops.list_notifications(
        db, user_id=current_user.user_id, page=page, limit=limit, is_read=is_read
    )
    return paged(items, total, PageParams(page=page, limit=limit), unread_count=unread)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    count = await notification_ops.count_unread(db, user_id=current_user.user_id)
    return {"unread_count": count}


@router.get("/latest", response_model=LatestNotificationsResponse)
async def get_latest_notifications(
    limit: int = Query(5, ge=1, le=50),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    items, unread = await notification_ops.get_latest_notifications(
        db, user_id=current_user.user_id, limit=limit
    )
    return {"items": items, "unread_count": unread}


@router.put("/mark-read", response_model=MarkReadResponse)
async def mark_as_read(
    payload: MarkReadRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    modified, unread = await notification_ops.mark_as_read(
        db, user_id=current_user.user_id, notification_ids=payload.notification_ids
    )
    return {"modified_count": modified, "unread_count": unread}


@router.put("/mark-all-read", response_model=MarkReadResponse)
async def mark_all_as_read(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    modified, unread = await notification_ops.mark_all_as_read(
        db, user_id=current_user.user_id
    )
    return {"modified_count": modified, "unread_count": unread}


@router.delete("/clear", response_model=ClearNotificationsResponse)
async def clear_notifications(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cleared = await notification_ops.clear_notifications(db, user_id=current_user.user_id)
    return {"cleared": cleared}


# ----------------------------------------------------------------------------
# Preferences
# ----------------------------------------------------------------------------


@router.get("/preferences", response_model=NotificationPreferences)
async def get_notification_preferences(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await notification_ops.get_preferences(db, user_id=current_user.user_id)


@router.put("/preferences", response_model=NotificationPreferences)
async def update_notification_preferences(
    payload: NotificationPreferencesUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    changes = payload.model_dump(by_alias=True, exclude_none=True)
    return await notification_ops.update_preferences(
        db, user_id=current_user.user_id, changes=changes
    )


@router.post(
    "/test", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED
)
async def create_test_notification(
    payload: TestNotificationRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Development helper; unavailable in production."""
    return await notification_ops.create_test_notification(
        db,
        user_id=current_user.user_id,
        title=payload.title,
        message=payload.message,
        type=payload.type,
    )


# ----------------------------------------------------------------------------
# Single notification
# ----------------------------------------------------------------------------


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Fetch a notification; reading it marks it read."""
    return await notification_ops.get_notification(
        db, user_id=current_user.user_id, notification_id=notification_id
    )


@router.delete("/{notification_id}", response_model=UnreadCountResponse)
async def delete_notification(
    notification_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    unread = await notification_ops.delete_notification(
        db, user_id=current_user.user_id, notification_id=notification_id
    )
    return {"unread_count": unread}
