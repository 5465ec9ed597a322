"""Marketplace Service schemas package."""

from services.marketplace_service.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatsResponse,
    BookingStatusUpdate,
    ExpireBookingsResponse,
)
from services.marketplace_service.schemas.common import MessageResponse
from services.marketplace_service.schemas.notification import (
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
from services.marketplace_service.schemas.offer import (
    OfferCreate,
    OfferListResponse,
    OfferResponse,
    OfferUpdate,
)
from services.marketplace_service.schemas.review import (
    ModerationQueueResponse,
    ReviewCreate,
    ReviewDelete,
    ReviewFlag,
    ReviewListResponse,
    ReviewModerate,
    ReviewModerationResponse,
    ReviewResponse,
    ReviewRespond,
    ReviewUpdate,
)
from services.marketplace_service.schemas.store import (
    ReviewStatsResponse,
    StoreCreate,
    StoreDetailResponse,
    StoreListResponse,
    StoreResponse,
    StoreStatsResponse,
    StoreUpdate,
    StoreWithDistance,
)

__all__ = [
    "BookingCreate",
    "BookingListResponse",
    "BookingResponse",
    "BookingStatsResponse",
    "BookingStatusUpdate",
    "ClearNotificationsResponse",
    "ExpireBookingsResponse",
    "LatestNotificationsResponse",
    "MarkReadRequest",
    "MarkReadResponse",
    "MessageResponse",
    "ModerationQueueResponse",
    "NotificationListResponse",
    "NotificationPreferences",
    "NotificationPreferencesUpdate",
    "NotificationResponse",
    "OfferCreate",
    "OfferListResponse",
    "OfferResponse",
    "OfferUpdate",
    "ReviewCreate",
    "ReviewDelete",
    "ReviewFlag",
    "ReviewListResponse",
    "ReviewModerate",
    "ReviewModerationResponse",
    "ReviewResponse",
    "ReviewRespond",
    "ReviewStatsResponse",
    "ReviewUpdate",
    "StoreCreate",
    "StoreDetailResponse",
    "StoreListResponse",
    "StoreResponse",
    "StoreStatsResponse",
    "StoreUpdate",
    "StoreWithDistance",
    "TestNotificationRequest",
    "UnreadCountResponse",
]
