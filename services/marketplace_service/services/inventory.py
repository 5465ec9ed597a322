"""Offer inventory: atomic reservation and release of units.

``available_quantity`` only moves through these two functions. Both issue a
single conditional UPDATE so concurrent requests cannot oversell an offer or
restore more units than were put up for sale.
"""

import uuid

from libs.common.logging import get_logger
from services.marketplace_service.models import Offer
from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def reserve_units(db: AsyncSession, *, offer_id: uuid.UUID, quantity: int) -> bool:
    """Take ``quantity`` units from the offer.

    Returns False, leaving the offer untouched, when fewer units remain.
    """
    result = await db.execute(
        update(Offer)
        .where(Offer.id == offer_id, Offer.available_quantity >= quantity)
        .values(available_quantity=Offer.available_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    reserved = result.rowcount == 1
    if reserved:
        logger.info("Reserved %d unit(s) of offer %s", quantity, offer_id)
    else:
        logger.info("Reservation of %d unit(s) of offer %s refused", quantity, offer_id)
    return reserved


async def release_units(db: AsyncSession, *, offer_id: uuid.UUID, quantity: int) -> None:
    """Return ``quantity`` units to the offer, never above its total quantity."""
    restored = Offer.available_quantity + quantity
    await db.execute(
        update(Offer)
        .where(Offer.id == offer_id)
        .values(
            available_quantity=case(
                (restored > Offer.quantity, Offer.quantity),
                else_=restored,
            )
        )
        .execution_options(synchronize_session=False)
    )
    logger.info("Released %d unit(s) of offer %s", quantity, offer_id)
