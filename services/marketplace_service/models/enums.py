"""Enum definitions for marketplace models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    USER = "user"
    SELLER = "seller"
    ADMIN = "admin"
    MODERATOR = "moderator"


class BusinessCategory(str, enum.Enum):
    """Shared by stores and offers."""

    RESTAURANT = "restaurant"
    BAKERY = "bakery"
    CAFE = "cafe"
    GROCERY = "grocery"
    PASTRY = "pastry"
    BUTCHER = "butcher"
    OTHER = "other"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    REJECTED = "rejected"


class CancelledBy(str, enum.Enum):
    USER = "user"
    SELLER = "seller"
    ADMIN = "admin"
    SYSTEM = "system"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"
    OTHER = "other"


class ModerationStatus(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    CHANGES_REQUESTED = "changes_requested"


class ModerationAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_CHANGES = "request_changes"


class NotificationType(str, enum.Enum):
    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_COMPLETED = "booking_completed"
    OFFER_EXPIRED = "offer_expired"
    NEW_OFFER = "new_offer"
    NEW_REVIEW = "new_review"
    PROMOTION = "promotion"
    SYSTEM_UPDATE = "system_update"
    ACCOUNT_ALERT = "account_alert"
    ADMIN_ALERT = "admin_alert"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_FAILED = "payment_failed"
    ANNOUNCEMENT = "announcement"
    OTHER = "other"


class RelatedEntityType(str, enum.Enum):
    BOOKING = "booking"
    OFFER = "offer"
    STORE = "store"
    USER = "user"
    REVIEW = "review"
    PAYMENT = "payment"
    SYSTEM = "system"


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class DistanceUnit(str, enum.Enum):
    KM = "km"
    MI = "mi"
