"""FastAPI application for the Marketplace Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.marketplace_service.routers import (
    admin_router,
    bookings_router,
    notifications_router,
    offers_router,
    reviews_router,
    stores_router,
)

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Create and configure the Marketplace Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="FoodSaver Marketplace Service",
        version="0.1.0",
        description="Surplus-food marketplace: stores, offers, bookings, reviews, notifications.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_rate_limiting(app)

    # Structured logging + request tracing
    add_observability_middleware(app)

    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": settings.SERVICE_NAME}

    @app.get("/", tags=["system"])
    async def root() -> dict[str, str]:
        return {"message": "Welcome to the FoodSaver marketplace API"}

    # Search/radius routes are declared before /{id} routes inside each router.
    app.include_router(stores_router, prefix=API_PREFIX)
    app.include_router(offers_router, prefix=API_PREFIX)
    app.include_router(bookings_router, prefix=API_PREFIX)
    app.include_router(reviews_router, prefix=API_PREFIX)
    app.include_router(notifications_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)

    return app


app = create_app()
