"""Marketplace Service models package."""

from services.marketplace_service.models.booking import (
    ACTIVE_BOOKING_STATUSES,
    Booking,
)
from services.marketplace_service.models.enums import (
    BookingStatus,
    BusinessCategory,
    CancelledBy,
    DistanceUnit,
    ModerationAction,
    ModerationStatus,
    NotificationPriority,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    RelatedEntityType,
    UserRole,
)
from services.marketplace_service.models.notification import (
    DEFAULT_NOTIFICATION_PREFERENCES,
    Notification,
    NotificationPreference,
)
from services.marketplace_service.models.offer import Offer
from services.marketplace_service.models.review import Review
from services.marketplace_service.models.store import Store
from services.marketplace_service.models.user import UserRef

__all__ = [
    "ACTIVE_BOOKING_STATUSES",
    "Booking",
    "BookingStatus",
    "BusinessCategory",
    "CancelledBy",
    "DEFAULT_NOTIFICATION_PREFERENCES",
    "DistanceUnit",
    "ModerationAction",
    "ModerationStatus",
    "Notification",
    "NotificationPreference",
    "NotificationPriority",
    "NotificationType",
    "Offer",
    "PaymentMethod",
    "PaymentStatus",
    "RelatedEntityType",
    "Review",
    "Store",
    "UserRef",
]
