"""Notification models: in-app messages and per-user channel preferences."""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.marketplace_service.models.enums import (
    NotificationPriority,
    NotificationType,
    RelatedEntityType,
    enum_values,
)
from sqlalchemy import JSON, Boolean
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

DEFAULT_NOTIFICATION_PREFERENCES = {
    "email": {
        "bookingUpdates": True,
        "newOffers": True,
        "promotions": True,
        "accountAlerts": True,
    },
    "push": {
        "bookingUpdates": True,
        "newOffers": True,
        "promotions": False,
        "accountAlerts": True,
    },
    "sms": {
        "bookingUpdates": True,
        "newOffers": False,
        "promotions": False,
        "accountAlerts": True,
    },
}


def default_expiry() -> datetime:
    return utc_now() + timedelta(days=get_settings().NOTIFICATION_TTL_DAYS)


# ============================================================================
# NOTIFICATION MODELS
# ============================================================================


class Notification(Base):
    """In-app notifications."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        SAEnum(
            NotificationType,
            values_callable=enum_values,
            name="notification_type_enum",
        ),
        nullable=False,
    )

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    read_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    related_entity_type: Mapped[Optional[RelatedEntityType]] = mapped_column(
        SAEnum(
            RelatedEntityType,
            values_callable=enum_values,
            name="notification_entity_type_enum",
        ),
        nullable=True,
    )
    related_entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    action_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    priority: Mapped[NotificationPriority] = mapped_column(
        SAEnum(
            NotificationPriority,
            values_callable=enum_values,
            name="notification_priority_enum",
        ),
        default=NotificationPriority.MEDIUM,
        server_default="medium",
    )

    scheduled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), default=default_expiry, nullable=True
    )

    # "metadata" is reserved on declarative classes
    extra_data: Mapped[dict] = mapped_column("metadata", JSON, default=dict)

    is_archived: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now)

    __table_args__ = (
        Index("ix_notifications_user_id_is_read", "user_id", "is_read"),
        Index("ix_notifications_user_id_created_at", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Notification {self.type} -> {self.user_id}>"


class NotificationPreference(Base):
    """Per-user channel toggles. Missing rows mean the defaults."""

    __tablename__ = "notification_preferences"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    preferences: Mapped[dict] = mapped_column(JSON, default=dict)

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, onupdate=utc_now
    )
