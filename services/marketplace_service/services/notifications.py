"""Notification fan-out and the current user's inbox operations.

``queue_notification`` only adds the row to the caller's session; it commits
together with the state change that produced it.
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.error_handler import BadRequestError, ForbiddenError, NotFoundError
from libs.common.logging import get_logger
from services.marketplace_service.models import (
    DEFAULT_NOTIFICATION_PREFERENCES,
    Notification,
    NotificationPreference,
    NotificationPriority,
    NotificationType,
    RelatedEntityType,
    UserRef,
    UserRole,
)
from services.marketplace_service.services.pagination import paginate
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------


def queue_notification(
    db: AsyncSession,
    *,
    user_id: str,
    title: str,
    message: str,
    type: NotificationType,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    related_entity_type: Optional[RelatedEntityType] = None,
    related_entity_id: Optional[uuid.UUID] = None,
    action_url: Optional[str] = None,
    expires_at: Optional[datetime] = None,
    metadata: Optional[dict] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        priority=priority,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        action_url=action_url,
        extra_data=metadata or {},
    )
    if expires_at is not None:
        notification.expires_at = expires_at
    db.add(notification)
    logger.debug("Queued %s notification for user %s", type.value, user_id)
    return notification


async def notify_admins(
    db: AsyncSession,
    *,
    title: str,
    message: str,
    related_entity_type: Optional[RelatedEntityType] = None,
    related_entity_id: Optional[uuid.UUID] = None,
    metadata: Optional[dict] = None,
) -> int:
    """Send an ``admin_alert`` to every admin. Returns how many were queued."""
    result = await db.execute(select(UserRef.id).where(UserRef.role == UserRole.ADMIN))
    admin_ids = result.scalars().all()
    for admin_id in admin_ids:
        queue_notification(
            db,
            user_id=admin_id,
            title=title,
            message=message,
            type=NotificationType.ADMIN_ALERT,
            priority=NotificationPriority.HIGH,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            metadata=metadata,
        )
    return len(admin_ids)


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------


def _visible(user_id: str):
    """Rows shown to the user: theirs, not archived, not expired."""
    return (
        Notification.user_id == user_id,
        Notification.is_archived.is_(False),
        or_(Notification.expires_at.is_(None), Notification.expires_at > utc_now()),
    )


async def count_unread(db: AsyncSession, *, user_id: str) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            *_visible(user_id), Notification.is_read.is_(False)
        )
    )
    return result.scalar_one()


async def list_notifications(
    db: AsyncSession,
    *,
    user_id: str,
    page: int = 1,
    limit: int = 20,
    is_read: Optional[bool] = None,
) -> tuple[list[Notification], int, int]:
    """Returns ``(notifications, total, unread_count)``, newest first."""
    query = select(Notification).where(*_visible(user_id))
    if is_read is not None:
        query = query.where(Notification.is_read.is_(is_read))
    query = query.order_by(Notification.created_at.desc())

    items, total = await paginate(db, query, page=page, limit=limit)
    return items, total, await count_unread(db, user_id=user_id)


async def get_notification(
    db: AsyncSession, *, user_id: str, notification_id: uuid.UUID
) -> Notification:
    """Fetch one notification and mark it read."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id, *_visible(user_id)
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError(f"No notification found with id {notification_id}")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        await db.commit()
    return notification


async def mark_as_read(
    db: AsyncSession, *, user_id: str, notification_ids: list[uuid.UUID]
) -> tuple[int, int]:
    """Returns ``(modified_count, unread_count)``."""
    if not notification_ids:
        raise BadRequestError("Please provide an array of notification IDs")

    result = await db.execute(
        update(Notification)
        .where(
            Notification.id.in_(notification_ids),
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount, await count_unread(db, user_id=user_id)


async def mark_all_as_read(db: AsyncSession, *, user_id: str) -> tuple[int, int]:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount, await count_unread(db, user_id=user_id)


async def delete_notification(
    db: AsyncSession, *, user_id: str, notification_id: uuid.UUID
) -> int:
    """Delete one notification. Returns the remaining unread count."""
    result = await db.execute(
        delete(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"No notification found with id {notification_id}")
    await db.commit()
    return await count_unread(db, user_id=user_id)


async def clear_notifications(db: AsyncSession, *, user_id: str) -> int:
    """Archive everything in production; delete outright elsewhere."""
    if get_settings().is_production:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_archived.is_(False))
            .values(is_archived=True)
        )
    else:
        stmt = delete(Notification).where(Notification.user_id == user_id)

    result = await db.execute(stmt.execution_options(synchronize_session=False))
    await db.commit()
    logger.info("Cleared %d notification(s) for user %s", result.rowcount, user_id)
    return result.rowcount


async def get_latest_notifications(
    db: AsyncSession, *, user_id: str, limit: int = 5
) -> tuple[list[Notification], int]:
    result = await db.execute(
        select(Notification)
        .where(*_visible(user_id))
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all()), await count_unread(db, user_id=user_id)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


def _merge_preferences(stored: Optional[dict]) -> dict:
    merged = {channel: dict(flags) for channel, flags in DEFAULT_NOTIFICATION_PREFERENCES.items()}
    for channel, flags in (stored or {}).items():
        if channel in merged and isinstance(flags, dict):
            merged[channel].update(
                {key: bool(value) for key, value in flags.items() if key in merged[channel]}
            )
    return merged


async def get_preferences(db: AsyncSession, *, user_id: str) -> dict:
    row = await db.get(NotificationPreference, user_id)
    return _merge_preferences(row.preferences if row else None)


async def update_preferences(db: AsyncSession, *, user_id: str, changes: dict) -> dict:
    """Merge ``changes`` into the stored channel toggles."""
    row = await db.get(NotificationPreference, user_id)
    current = _merge_preferences(row.preferences if row else None)
    for channel, flags in changes.items():
        if channel in current and flags:
            current[channel].update(
                {key: value for key, value in flags.items() if value is not None}
            )

    if row is None:
        row = NotificationPreference(user_id=user_id, preferences=current)
        db.add(row)
    else:
        row.preferences = current
    await db.commit()
    return current


# ---------------------------------------------------------------------------
# Development helpers
# ---------------------------------------------------------------------------


async def create_test_notification(
    db: AsyncSession,
    *,
    user_id: str,
    title: str,
    message: str,
    type: NotificationType = NotificationType.OTHER,
) -> Notification:
    if get_settings().is_production:
        raise ForbiddenError("This route is not available in production")

    notification = queue_notification(
        db,
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        priority=NotificationPriority.MEDIUM,
        related_entity_type=RelatedEntityType.SYSTEM,
        metadata={"is_test": True},
    )
    await db.commit()
    return notification
