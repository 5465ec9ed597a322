"""Shared aggregation queries over bookings."""

from decimal import Decimal
from typing import Any

from libs.common.datetime_utils import months_ago, utc_now
from services.marketplace_service.models import Booking, BookingStatus
from sqlalchemy import case, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

STATS_WINDOW_MONTHS = 6


def money(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


async def bookings_by_status(db: AsyncSession, *filters) -> list[dict]:
    query = (
        select(
            Booking.status,
            func.count(Booking.id),
            func.sum(Booking.total_price),
            func.avg(Booking.quantity),
            func.min(Booking.total_price),
            func.max(Booking.total_price),
        )
        .where(*filters)
        .group_by(Booking.status)
        .order_by(Booking.status)
    )
    rows = (await db.execute(query)).all()
    return [
        {
            "status": status,
            "count": count,
            "total_revenue": money(revenue),
            "avg_quantity": round(float(avg_qty or 0), 2),
            "min_price": money(min_price),
            "max_price": money(max_price),
        }
        for status, count, revenue, avg_qty, min_price, max_price in rows
    ]


async def booking_totals(db: AsyncSession, *filters) -> dict:
    query = select(
        func.count(Booking.id),
        func.sum(Booking.total_price),
        func.coalesce(
            func.sum(case((Booking.status == BookingStatus.COMPLETED, 1), else_=0)), 0
        ),
        func.coalesce(
            func.sum(case((Booking.status == BookingStatus.CANCELLED, 1), else_=0)), 0
        ),
    ).where(*filters)
    total, revenue, completed, cancelled = (await db.execute(query)).one()
    return {
        "total_bookings": total,
        "total_revenue": money(revenue),
        "completed_bookings": int(completed),
        "cancelled_bookings": int(cancelled),
    }


async def monthly_bookings(db: AsyncSession, *filters) -> list[dict]:
    """Bookings created in the last six months, grouped by calendar month."""
    since = months_ago(utc_now(), STATS_WINDOW_MONTHS)
    year = extract("year", Booking.created_at)
    month = extract("month", Booking.created_at)
    query = (
        select(year, month, func.count(Booking.id), func.sum(Booking.total_price))
        .where(*filters, Booking.created_at >= since)
        .group_by(year, month)
        .order_by(year, month)
    )
    rows = (await db.execute(query)).all()
    return [
        {
            "year": int(y),
            "month": int(m),
            "count": count,
            "revenue": money(revenue),
        }
        for y, m, count, revenue in rows
    ]
