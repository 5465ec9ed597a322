"""Admin router: marketplace housekeeping."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.marketplace_service.schemas import ExpireBookingsResponse
from services.marketplace_service.services import bookings as booking_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/bookings/expire", response_model=ExpireBookingsResponse)
async def expire_overdue_bookings(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Expire active bookings whose pickup window has closed."""
    expired = await booking_ops.expire_overdue_bookings(db)
    return {"expired": expired}
