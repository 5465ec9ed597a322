"""Integration tests for offer endpoints."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from libs.common.datetime_utils import utc_now
from services.marketplace_service.app.main import app
from tests.conftest import API, make_seller, override_auth
from tests.factories import OfferFactory, StoreFactory

SELLER = make_seller("seller-1")


def _offer_payload(**overrides):
    payload = {
        "title": "Lunch leftovers box",
        "description": "Chorba and bread",
        "category": "restaurant",
        "original_price": "900.00",
        "discounted_price": "350.00",
        "quantity": 3,
        "pickup_start": (utc_now() + timedelta(hours=1)).isoformat(),
        "pickup_end": (utc_now() + timedelta(hours=2)).isoformat(),
    }
    payload.update(overrides)
    return payload


async def _store(db_session, **overrides):
    store = StoreFactory.create(owner_id=SELLER.user_id, **overrides)
    db_session.add(store)
    await db_session.commit()
    return store


# ---------------------------------------------------------------------------
# Seller actions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_offer(client, db_session):
    """POST /stores/{id}/offers: lists an offer with full availability."""
    store = await _store(db_session)

    with override_auth(app, SELLER):
        response = await client.post(f"{API}/stores/{store.id}/offers", json=_offer_payload())

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["available_quantity"] == 3
    assert data["store_id"] == str(store.id)
    assert data["discount_percentage"] == 61
    assert data["city"] == store.city


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_offer_discount_not_below_price_is_422(client, db_session):
    store = await _store(db_session)

    with override_auth(app, SELLER):
        response = await client.post(
            f"{API}/stores/{store.id}/offers",
            json=_offer_payload(discounted_price="900.00"),
        )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_offer_window_reversed_is_422(client, db_session):
    store = await _store(db_session)
    start = utc_now() + timedelta(hours=2)

    with override_auth(app, SELLER):
        response = await client.post(
            f"{API}/stores/{store.id}/offers",
            json=_offer_payload(
                pickup_start=start.isoformat(),
                pickup_end=(start - timedelta(minutes=30)).isoformat(),
            ),
        )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_offer_in_someone_elses_store_is_404(client, db_session):
    store = await _store(db_session)

    response = await client.post(f"{API}/stores/{store.id}/offers", json=_offer_payload())

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_offer_quantity(client, db_session):
    store = await _store(db_session)
    offer = OfferFactory.create(store=store, quantity=4, available_quantity=1)
    db_session.add(offer)
    await db_session.commit()

    with override_auth(app, SELLER):
        response = await client.put(f"{API}/offers/{offer.id}", json={"quantity": 6})

    assert response.status_code == 200, response.text
    assert response.json()["available_quantity"] == 3


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "field",
    ["title", "original_price", "discounted_price", "quantity", "pickup_start", "pickup_end"],
)
async def test_update_offer_null_required_field_is_422(client, db_session, field):
    store = await _store(db_session)
    offer = OfferFactory.create(store=store)
    db_session.add(offer)
    await db_session.commit()

    with override_auth(app, SELLER):
        response = await client.put(f"{API}/offers/{offer.id}", json={field: None})

    assert response.status_code == 422
    await db_session.refresh(offer)
    assert offer.title == "Surprise bread bag"
    assert offer.pickup_end is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_offer_null_optional_field_is_accepted(client, db_session):
    store = await _store(db_session)
    offer = OfferFactory.create(store=store)
    db_session.add(offer)
    await db_session.commit()

    with override_auth(app, SELLER):
        response = await client.put(f"{API}/offers/{offer.id}", json={"address": None})

    assert response.status_code == 200, response.text
    assert response.json()["address"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_offer(client, db_session):
    store = await _store(db_session)
    offer = OfferFactory.create(store=store)
    db_session.add(offer)
    await db_session.commit()

    response = await client.delete(f"{API}/offers/{offer.id}")
    assert response.status_code == 403

    with override_auth(app, SELLER):
        response = await client.delete(f"{API}/offers/{offer.id}")
    assert response.status_code == 200

    response = await client.get(f"{API}/offers/{offer.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_offer_photos_capped(client, db_session, upload_dir, monkeypatch):
    from tests.conftest import settings

    monkeypatch.setattr(settings, "MAX_OFFER_IMAGES", 1)
    store = await _store(db_session)
    offer = OfferFactory.create(store=store)
    db_session.add(offer)
    await db_session.commit()

    files = {"file": ("box.png", b"\x89PNG fake", "image/png")}
    with override_auth(app, SELLER):
        first = await client.put(f"{API}/offers/{offer.id}/photo", files=files)
        second = await client.put(f"{API}/offers/{offer.id}/photo", files=files)

    assert first.status_code == 200, first.text
    assert first.json()["images"] == [f"photo_{offer.id}_0.png"]
    assert second.status_code == 400


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_and_get_offer(client, db_session):
    store = await _store(db_session)
    offer = OfferFactory.create(store=store)
    db_session.add(offer)
    await db_session.commit()

    listing = await client.get(f"{API}/offers")
    assert listing.status_code == 200
    assert listing.json()["total"] == 1

    response = await client.get(f"{API}/offers/{offer.id}")
    assert response.status_code == 200
    assert Decimal(response.json()["discounted_price"]) == Decimal("300")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_unknown_offer_is_404(client):
    response = await client.get(f"{API}/offers/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_nearby_offers(client, db_session):
    store = await _store(db_session)
    db_session.add_all(
        [
            OfferFactory.create(store=store, title="close"),
            OfferFactory.create(store=store, title="far", latitude=35.6971, longitude=-0.6308),
        ]
    )
    await db_session.commit()

    response = await client.get(
        f"{API}/offers/nearby", params={"lat": 36.75, "lng": 3.06, "distance": 2}
    )

    assert response.status_code == 200
    assert [o["title"] for o in response.json()] == ["close"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_featured_offers_by_rating(client, db_session):
    store = await _store(db_session)
    db_session.add_all(
        [
            OfferFactory.create(store=store, title="ok", rating=3.0),
            OfferFactory.create(store=store, title="best", rating=4.8),
            OfferFactory.create(store=store, title="inactive", rating=5.0, is_active=False),
        ]
    )
    await db_session.commit()

    response = await client.get(f"{API}/offers/featured")

    assert [o["title"] for o in response.json()] == ["best", "ok"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_offers_filters(client, db_session):
    store = await _store(db_session)
    db_session.add_all(
        [
            OfferFactory.create(store=store, title="Croissants", category="bakery"),
            OfferFactory.create(store=store, title="Merguez", category="butcher"),
        ]
    )
    await db_session.commit()

    response = await client.get(f"{API}/offers/search", params={"category": "butcher"})
    assert [o["title"] for o in response.json()] == ["Merguez"]

    response = await client.get(f"{API}/offers/search", params={"sort": "cheapest"})
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_offers_by_store_and_seller(client, db_session):
    store = await _store(db_session)
    db_session.add(OfferFactory.create(store=store))
    await db_session.commit()

    by_store = await client.get(f"{API}/stores/{store.id}/offers")
    by_seller = await client.get(f"{API}/offers/seller/{SELLER.user_id}")
    missing_store = await client.get(f"{API}/stores/{uuid.uuid4()}/offers")

    assert len(by_store.json()) == 1
    assert len(by_seller.json()) == 1
    assert missing_store.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_similar_offers(client, db_session):
    store = await _store(db_session)
    base = OfferFactory.create(store=store)
    twin = OfferFactory.create(store=store, title="twin")
    db_session.add_all([base, twin])
    await db_session.commit()

    response = await client.get(f"{API}/offers/{base.id}/similar")

    assert response.status_code == 200
    assert [o["title"] for o in response.json()] == ["twin"]
