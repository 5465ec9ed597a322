"""Integration tests for booking endpoints."""

import uuid
from datetime import timedelta

import pytest
from libs.common.datetime_utils import utc_now
from services.marketplace_service.app.main import app
from services.marketplace_service.models import BookingStatus
from tests.conftest import API, make_admin, make_seller, make_user, override_auth
from tests.factories import BookingFactory, OfferFactory, StoreFactory

SELLER = make_seller("seller-1")


async def _offer(db_session, **overrides):
    store = StoreFactory.create(owner_id=SELLER.user_id)
    offer = OfferFactory.create(store=store, **overrides)
    db_session.add_all([store, offer])
    await db_session.commit()
    return offer


async def _book(client, offer, quantity=1):
    response = await client.post(
        f"{API}/offers/{offer.id}/bookings", json={"quantity": quantity}
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking(client, db_session):
    """POST /offers/{id}/bookings: reserves units and returns a pickup code."""
    offer = await _offer(db_session, quantity=4)

    data = await _book(client, offer, quantity=2)

    assert data["status"] == "pending"
    assert data["user_id"] == "buyer-1"
    assert data["seller_id"] == SELLER.user_id
    assert len(data["pickup_code"]) == 6
    assert data["payment_method"] == "cash"

    offer_data = (await client.get(f"{API}/offers/{offer.id}")).json()
    assert offer_data["available_quantity"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking_over_quantity_is_400(client, db_session):
    offer = await _offer(db_session, quantity=2)

    response = await client.post(f"{API}/offers/{offer.id}/bookings", json={"quantity": 3})

    assert response.status_code == 400
    assert response.json()["detail"] == "Only 2 item(s) available for this offer"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking_zero_quantity_is_422(client, db_session):
    offer = await _offer(db_session)

    response = await client.post(f"{API}/offers/{offer.id}/bookings", json={"quantity": 0})

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking_for_expired_offer_is_400(client, db_session):
    offer = await _offer(
        db_session,
        pickup_start=utc_now() - timedelta(hours=2),
        pickup_end=utc_now() - timedelta(hours=1),
    )

    response = await client.post(f"{API}/offers/{offer.id}/bookings", json={})

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_booking_unknown_offer_is_404(client):
    response = await client.post(f"{API}/offers/{uuid.uuid4()}/bookings", json={})
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_full_lifecycle_with_pickup_code(client, db_session):
    offer = await _offer(db_session)
    booking = await _book(client, offer)

    with override_auth(app, SELLER):
        confirmed = await client.put(
            f"{API}/bookings/{booking['id']}", json={"status": "confirmed"}
        )
        verified = await client.get(f"{API}/bookings/verify/{booking['pickup_code'].lower()}")
        completed = await client.put(f"{API}/bookings/complete/{booking['pickup_code']}")

    assert confirmed.status_code == 200
    assert confirmed.json()["confirmed_at"] is not None
    assert verified.status_code == 200
    assert verified.json()["id"] == booking["id"]
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_buyer_cannot_confirm_own_booking(client, db_session):
    offer = await _offer(db_session)
    booking = await _book(client, offer)

    response = await client.put(f"{API}/bookings/{booking['id']}", json={"status": "confirmed"})

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_transition_is_400(client, db_session):
    offer = await _offer(db_session)
    booking = await _book(client, offer)

    with override_auth(app, SELLER):
        response = await client.put(
            f"{API}/bookings/{booking['id']}", json={"status": "completed"}
        )

    assert response.status_code == 400
    assert "Invalid status transition" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_restores_availability(client, db_session):
    offer = await _offer(db_session, quantity=3)
    booking = await _book(client, offer, quantity=3)

    response = await client.put(
        f"{API}/bookings/{booking['id']}",
        json={"status": "cancelled", "cancellation_reason": "Running late"},
    )

    assert response.status_code == 200
    assert response.json()["cancelled_by"] == "user"
    await db_session.refresh(offer)
    assert offer.available_quantity == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_pending_booking(client, db_session):
    offer = await _offer(db_session, quantity=2)
    booking = await _book(client, offer, quantity=2)

    response = await client.delete(f"{API}/bookings/{booking['id']}")

    assert response.status_code == 200
    await db_session.refresh(offer)
    assert offer.available_quantity == 2
    assert (await client.get(f"{API}/bookings/{booking['id']}")).status_code == 404


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_booking_visible_to_parties_only(client, db_session):
    offer = await _offer(db_session)
    booking = await _book(client, offer)
    url = f"{API}/bookings/{booking['id']}"

    assert (await client.get(url)).status_code == 200
    with override_auth(app, SELLER):
        assert (await client.get(url)).status_code == 200
    with override_auth(app, make_admin()):
        assert (await client.get(url)).status_code == 200
    with override_auth(app, make_user("buyer-2")):
        assert (await client.get(url)).status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_user_and_seller_booking_lists(client, db_session):
    offer = await _offer(db_session)
    await _book(client, offer)

    mine = await client.get(f"{API}/bookings/user/buyer-1")
    someone_else = await client.get(f"{API}/bookings/user/buyer-2")
    with override_auth(app, SELLER):
        sold = await client.get(f"{API}/bookings/seller/{SELLER.user_id}")
        per_offer = await client.get(f"{API}/offers/{offer.id}/bookings")

    assert len(mine.json()) == 1
    assert someone_else.status_code == 403
    assert len(sold.json()) == 1
    assert len(per_offer.json()) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_all_bookings_by_status(client, db_session):
    offer = await _offer(db_session)
    db_session.add_all(
        [
            BookingFactory.create(offer=offer),
            BookingFactory.create(offer=offer, user_id="buyer-2", status=BookingStatus.COMPLETED),
        ]
    )
    await db_session.commit()

    assert (await client.get(f"{API}/bookings")).status_code == 403

    with override_auth(app, make_admin()):
        everything = await client.get(f"{API}/bookings")
        completed = await client.get(f"{API}/bookings", params={"status": "completed"})

    assert everything.json()["total"] == 2
    assert completed.json()["total"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_booking_stats_for_seller(client, db_session):
    offer = await _offer(db_session)
    await _book(client, offer)

    with override_auth(app, SELLER):
        response = await client.get(f"{API}/bookings/stats")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["totals"]["total_bookings"] == 1
    assert data["by_status"][0]["status"] == "pending"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_expires_overdue_bookings(client, db_session):
    offer = await _offer(
        db_session,
        pickup_start=utc_now() - timedelta(hours=2),
        pickup_end=utc_now() - timedelta(hours=1),
    )
    db_session.add(BookingFactory.create(offer=offer))
    await db_session.commit()

    assert (await client.post(f"{API}/admin/bookings/expire")).status_code == 403

    with override_auth(app, make_admin()):
        response = await client.post(f"{API}/admin/bookings/expire")

    assert response.status_code == 200
    assert response.json() == {"expired": 1}
