"""Integration tests for store endpoints."""

import uuid

import pytest
from services.marketplace_service.app.main import app
from tests.conftest import API, make_seller, make_user, override_auth
from tests.factories import OfferFactory, ReviewFactory, StoreFactory

STORE_PAYLOAD = {
    "name": "Café Tantonville",
    "description": "Coffee and viennoiseries",
    "category": "cafe",
    "phone": "0771234567",
    "address": "Place Port Said",
    "city": "Algiers",
    "latitude": 36.7763,
    "longitude": 3.0603,
    "opening_hours": {"monday": {"open": "07:30", "close": "20:00"}},
}


# ---------------------------------------------------------------------------
# Create / update / delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_store(client):
    """POST /stores: creates a store owned by the caller."""
    response = await client.post(f"{API}/stores", json=STORE_PAYLOAD)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["owner_id"] == "buyer-1"
    assert data["category"] == "cafe"
    assert data["logo"] == "no-photo.jpg"
    assert data["rating"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_store_rejects_bad_phone(client):
    response = await client.post(f"{API}/stores", json={**STORE_PAYLOAD, "phone": "12345"})
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_second_store_is_400(client):
    assert (await client.post(f"{API}/stores", json=STORE_PAYLOAD)).status_code == 201

    response = await client.post(f"{API}/stores", json={**STORE_PAYLOAD, "name": "Two"})

    assert response.status_code == 400
    assert "already published a store" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_store_by_owner_and_stranger(client):
    created = (await client.post(f"{API}/stores", json=STORE_PAYLOAD)).json()

    response = await client.put(f"{API}/stores/{created['id']}", json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"

    with override_auth(app, make_user("buyer-2")):
        response = await client.put(f"{API}/stores/{created['id']}", json={"name": "Hijack"})
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("field", ["name", "phone", "address", "category", "is_active"])
async def test_update_store_null_required_field_is_422(client, field):
    created = (await client.post(f"{API}/stores", json=STORE_PAYLOAD)).json()

    response = await client.put(f"{API}/stores/{created['id']}", json={field: None})

    assert response.status_code == 422
    detail = (await client.get(f"{API}/stores/{created['id']}")).json()
    assert detail["name"] == STORE_PAYLOAD["name"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_store_with_running_offer_is_400(client, db_session):
    store = StoreFactory.create()
    db_session.add_all([store, OfferFactory.create(store=store)])
    await db_session.commit()

    with override_auth(app, make_seller("seller-1")):
        response = await client.delete(f"{API}/stores/{store.id}")

    assert response.status_code == 400
    assert "active offers" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_store_photo(client, db_session, upload_dir):
    store = StoreFactory.create()
    db_session.add(store)
    await db_session.commit()

    with override_auth(app, make_seller("seller-1")):
        response = await client.put(
            f"{API}/stores/{store.id}/photo",
            files={"file": ("front.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
        )

    assert response.status_code == 200, response.text
    assert response.json()["photo"] == f"photo_{store.id}.jpg"
    assert (upload_dir / "stores" / f"photo_{store.id}.jpg").exists()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_non_image_is_400(client, db_session, upload_dir):
    store = StoreFactory.create()
    db_session.add(store)
    await db_session.commit()

    with override_auth(app, make_seller("seller-1")):
        response = await client.put(
            f"{API}/stores/{store.id}/photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

    assert response.status_code == 400


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_stores_paginates(client, db_session):
    db_session.add_all([StoreFactory.create(name=f"Store {i}") for i in range(3)])
    db_session.add(StoreFactory.create(name="Closed", is_active=False))
    await db_session.commit()

    response = await client.get(f"{API}/stores", params={"page": 1, "limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["page_size"] == 2
    assert data["total_pages"] == 2
    assert len(data["items"]) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_stores_by_text_and_category(client, db_session):
    db_session.add_all(
        [
            StoreFactory.create(name="Pâtisserie Amine", category="pastry"),
            StoreFactory.create(name="Boucherie Amine", category="butcher"),
            StoreFactory.create(name="Café Central", category="cafe"),
        ]
    )
    await db_session.commit()

    response = await client.get(
        f"{API}/stores/search", params={"q": "amine", "category": "pastry,cafe"}
    )

    assert response.status_code == 200
    assert [s["name"] for s in response.json()["items"]] == ["Pâtisserie Amine"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stores_in_radius_include_distance(client, db_session):
    db_session.add_all(
        [
            StoreFactory.create(name="here"),
            StoreFactory.create(name="oran", latitude=35.6971, longitude=-0.6308),
        ]
    )
    await db_session.commit()

    response = await client.get(
        f"{API}/stores/radius", params={"lat": 36.75, "lng": 3.06, "distance": 3}
    )

    assert response.status_code == 200
    data = response.json()
    assert [s["name"] for s in data] == ["here"]
    assert data[0]["distance"] < 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_store_detail(client, db_session):
    store = StoreFactory.create()
    db_session.add_all(
        [
            store,
            OfferFactory.create(store=store),
            ReviewFactory.create(store_id=store.id, rating=4),
            ReviewFactory.create(store_id=store.id, rating=5, user_id="buyer-2"),
        ]
    )
    await db_session.commit()

    response = await client.get(f"{API}/stores/{store.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["active_offers"] == 1
    assert data["stats"] == {"average_rating": 4.5, "total_ratings": 2}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_unknown_store_is_404(client):
    response = await client.get(f"{API}/stores/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["detail"].startswith("No store with the id of")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_review_stats(client, db_session):
    store = StoreFactory.create()
    db_session.add_all(
        [
            store,
            ReviewFactory.create(store_id=store.id, rating=5),
            ReviewFactory.create(store_id=store.id, rating=3, comment=None),
        ]
    )
    await db_session.commit()

    response = await client.get(f"{API}/stores/{store.id}/review-stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["distribution"]["5"] == 1
    assert data["with_comment"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_stats_owner_only(client, db_session):
    store = StoreFactory.create()
    db_session.add(store)
    await db_session.commit()

    response = await client.get(f"{API}/stores/{store.id}/stats")
    assert response.status_code == 403

    with override_auth(app, make_seller("seller-1")):
        response = await client.get(f"{API}/stores/{store.id}/stats")
    assert response.status_code == 200
    assert response.json()["total_offers"] == 0
