"""Notification schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.marketplace_service.models import (
    NotificationPriority,
    NotificationType,
    RelatedEntityType,
)

# ============================================================================
# NOTIFICATION SCHEMAS
# ============================================================================


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    title: str
    message: str
    type: NotificationType
    is_read: bool
    read_at: Optional[datetime] = None
    related_entity_type: Optional[RelatedEntityType] = None
    related_entity_id: Optional[uuid.UUID] = None
    action_url: Optional[str] = None
    image: Optional[str] = None
    priority: NotificationPriority
    expires_at: Optional[datetime] = None
    metadata: dict = Field(default_factory=dict, validation_alias="extra_data")
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    unread_count: int


class LatestNotificationsResponse(BaseModel):
    items: list[NotificationResponse]
    unread_count: int


class MarkReadRequest(BaseModel):
    notification_ids: list[uuid.UUID]


class MarkReadResponse(BaseModel):
    modified_count: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class ClearNotificationsResponse(BaseModel):
    cleared: int


class TestNotificationRequest(BaseModel):
    title: str = Field("Test Notification", max_length=100)
    message: str = Field("This is a test notification", max_length=500)
    type: NotificationType = NotificationType.OTHER


# ============================================================================
# PREFERENCES SCHEMAS
# ============================================================================


class ChannelPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_updates: bool = Field(True, alias="bookingUpdates")
    new_offers: bool = Field(True, alias="newOffers")
    promotions: bool = Field(True, alias="promotions")
    account_alerts: bool = Field(True, alias="accountAlerts")


class ChannelPreferencesUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_updates: Optional[bool] = Field(None, alias="bookingUpdates")
    new_offers: Optional[bool] = Field(None, alias="newOffers")
    promotions: Optional[bool] = Field(None, alias="promotions")
    account_alerts: Optional[bool] = Field(None, alias="accountAlerts")


class NotificationPreferences(BaseModel):
    email: ChannelPreferences
    push: ChannelPreferences
    sms: ChannelPreferences


class NotificationPreferencesUpdate(BaseModel):
    email: Optional[ChannelPreferencesUpdate] = None
    push: Optional[ChannelPreferencesUpdate] = None
    sms: Optional[ChannelPreferencesUpdate] = None
