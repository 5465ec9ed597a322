"""Marketplace Service routers package."""

from services.marketplace_service.routers.admin import router as admin_router
from services.marketplace_service.routers.bookings import router as bookings_router
from services.marketplace_service.routers.notifications import (
    router as notifications_router,
)
from services.marketplace_service.routers.offers import router as offers_router
from services.marketplace_service.routers.reviews import router as reviews_router
from services.marketplace_service.routers.stores import router as stores_router

__all__ = [
    "admin_router",
    "bookings_router",
    "notifications_router",
    "offers_router",
    "reviews_router",
    "stores_router",
]
