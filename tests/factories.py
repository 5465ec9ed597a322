"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    store = StoreFactory.create(owner_id="seller-1")
    db_session.add(store)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _code() -> str:
    return uuid.uuid4().hex[:6].upper()


# Algiers city centre
ALGIERS = (36.7538, 3.0588)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserRefFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import UserRef, UserRole

        user_id = overrides.pop("id", f"user-{uuid.uuid4().hex[:8]}")
        defaults = {
            "id": user_id,
            "name": "Test User",
            "email": f"{user_id}@test.com",
            "role": UserRole.USER,
        }
        defaults.update(overrides)
        return UserRef(**defaults)


# ---------------------------------------------------------------------------
# Stores & offers
# ---------------------------------------------------------------------------


class StoreFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import BusinessCategory, Store

        defaults = {
            "id": _uuid(),
            "owner_id": "seller-1",
            "name": "Boulangerie du Port",
            "description": "Fresh bread and pastries every morning",
            "category": BusinessCategory.BAKERY,
            "phone": "0551234567",
            "address": "12 Rue Didouche Mourad",
            "city": "Algiers",
            "latitude": ALGIERS[0],
            "longitude": ALGIERS[1],
            "opening_hours": {"monday": {"open": "07:00", "close": "19:00"}},
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Store(**defaults)


class OfferFactory:
    @staticmethod
    def create(store=None, **overrides):
        from services.marketplace_service.models import BusinessCategory, Offer

        quantity = overrides.get("quantity", 5)
        defaults = {
            "id": _uuid(),
            "store_id": store.id if store else _uuid(),
            "seller_id": store.owner_id if store else "seller-1",
            "title": "Surprise bread bag",
            "description": "Today's unsold loaves and croissants",
            "category": BusinessCategory.BAKERY,
            "original_price": Decimal("800.00"),
            "discounted_price": Decimal("300.00"),
            "quantity": quantity,
            "available_quantity": quantity,
            "pickup_start": _now() + timedelta(hours=1),
            "pickup_end": _now() + timedelta(hours=3),
            "images": [],
            "address": store.address if store else "12 Rue Didouche Mourad",
            "city": store.city if store else "Algiers",
            "latitude": store.latitude if store else ALGIERS[0],
            "longitude": store.longitude if store else ALGIERS[1],
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Offer(**defaults)


# ---------------------------------------------------------------------------
# Bookings & reviews
# ---------------------------------------------------------------------------


class BookingFactory:
    @staticmethod
    def create(offer=None, **overrides):
        from services.marketplace_service.models import Booking, BookingStatus

        quantity = overrides.get("quantity", 1)
        price = offer.discounted_price if offer else Decimal("300.00")
        defaults = {
            "id": _uuid(),
            "offer_id": offer.id if offer else _uuid(),
            "store_id": offer.store_id if offer else _uuid(),
            "user_id": "buyer-1",
            "seller_id": offer.seller_id if offer else "seller-1",
            "quantity": quantity,
            "total_price": price * quantity,
            "status": BookingStatus.PENDING,
            "pickup_code": _code(),
            "pickup_time": offer.pickup_start if offer else _now() + timedelta(hours=1),
            "offer_title": offer.title if offer else "Surprise bread bag",
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Booking(**defaults)


class ReviewFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import Review

        defaults = {
            "id": _uuid(),
            "user_id": "buyer-1",
            "store_id": _uuid(),
            "rating": 4,
            "comment": "Great value, will come back",
            "images": [],
            "flags": [],
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Review(**defaults)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class NotificationFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import Notification, NotificationType

        defaults = {
            "id": _uuid(),
            "user_id": "buyer-1",
            "title": "Hello",
            "message": "Something happened",
            "type": NotificationType.OTHER,
            "extra_data": {},
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Notification(**defaults)
