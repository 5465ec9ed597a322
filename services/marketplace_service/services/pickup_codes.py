"""Pickup code generation and lookup normalisation."""

import secrets

from libs.common.config import get_settings
from libs.common.error_handler import ConflictError
from libs.common.logging import get_logger
from services.marketplace_service.models import Booking
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Visually ambiguous characters (0/O, 1/I) are left out.
PICKUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MAX_CODE_ATTEMPTS = 10


def generate_pickup_code(length: int | None = None) -> str:
    length = length or get_settings().PICKUP_CODE_LENGTH
    return "".join(secrets.choice(PICKUP_CODE_ALPHABET) for _ in range(length))


def normalize_pickup_code(code: str) -> str:
    return code.strip().upper()


async def generate_unique_pickup_code(db: AsyncSession) -> str:
    """Draw codes until one is not held by any booking."""
    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        code = generate_pickup_code()
        result = await db.execute(
            select(Booking.id).where(Booking.pickup_code == code).limit(1)
        )
        if result.scalar_one_or_none() is None:
            return code
        logger.warning("Pickup code collision (attempt %d)", attempt)

    raise ConflictError(
        "Could not allocate a unique pickup code", code="PICKUP_CODE_EXHAUSTED"
    )
