"""Unit tests for store onboarding and deactivation."""

from datetime import timedelta

import pytest
from libs.common.datetime_utils import utc_now
from libs.common.error_handler import BadRequestError, ForbiddenError
from services.marketplace_service.models import BusinessCategory, UserRef, UserRole
from services.marketplace_service.services import stores as store_ops
from tests.conftest import make_admin, make_user
from tests.factories import BookingFactory, OfferFactory, StoreFactory, UserRefFactory


def _store_data(**overrides):
    data = {
        "name": "Green Grocer",
        "description": "Fruit and vegetables",
        "category": "grocery",
        "phone": "0661234567",
        "address": "3 Rue Larbi Ben M'hidi",
        "city": "Oran",
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_store_promotes_buyer_to_seller(db_session):
    db_session.add(UserRefFactory.create(id="buyer-1"))
    await db_session.commit()

    store = await store_ops.create_store(
        db_session, actor=make_user("buyer-1"), data=_store_data()
    )

    assert store.owner_id == "buyer-1"
    assert store.category == BusinessCategory.GROCERY
    user = await db_session.get(UserRef, "buyer-1")
    await db_session.refresh(user)
    assert user.role == UserRole.SELLER


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_store_is_refused_for_non_admins(db_session):
    actor = make_user("buyer-1", role="seller")
    await store_ops.create_store(db_session, actor=actor, data=_store_data())

    with pytest.raises(BadRequestError, match="already published a store"):
        await store_ops.create_store(db_session, actor=actor, data=_store_data(name="Another"))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_may_open_several_stores(db_session):
    admin = make_admin()
    await store_ops.create_store(db_session, actor=admin, data=_store_data())
    await store_ops.create_store(db_session, actor=admin, data=_store_data(name="Second"))

    assert len(await store_ops.get_stores_by_owner(db_session, admin.user_id)) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_store_blocked_by_running_offers(db_session):
    store = StoreFactory.create()
    db_session.add_all([store, OfferFactory.create(store=store)])
    await db_session.commit()

    with pytest.raises(BadRequestError, match="1 active offers"):
        await store_ops.delete_store(db_session, actor=make_user("seller-1"), store_id=store.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_store_deactivates_when_offers_are_over(db_session):
    store = StoreFactory.create()
    ended = OfferFactory.create(
        store=store,
        pickup_start=utc_now() - timedelta(hours=3),
        pickup_end=utc_now() - timedelta(hours=1),
    )
    db_session.add_all([store, ended])
    await db_session.commit()

    await store_ops.delete_store(db_session, actor=make_user("seller-1"), store_id=store.id)

    assert store.is_active is False
    items, total = await store_ops.list_stores(db_session)
    assert total == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_only_owner_updates_store(db_session):
    store = StoreFactory.create()
    db_session.add(store)
    await db_session.commit()

    with pytest.raises(ForbiddenError):
        await store_ops.update_store(
            db_session, actor=make_user("seller-2"), store_id=store.id, changes={"name": "x"}
        )


@pytest.mark.unit
def test_parse_categories_ignores_unknown():
    assert store_ops.parse_categories("bakery, cafe,spaceship") == [
        BusinessCategory.BAKERY,
        BusinessCategory.CAFE,
    ]
    assert store_ops.parse_categories(None) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stores_in_radius_sorted_by_distance(db_session):
    db_session.add_all(
        [
            StoreFactory.create(name="far", latitude=36.80, longitude=3.10),
            StoreFactory.create(name="near", latitude=36.754, longitude=3.059),
            StoreFactory.create(name="oran", latitude=35.6971, longitude=-0.6308),
        ]
    )
    await db_session.commit()

    matches = await store_ops.get_stores_in_radius(db_session, lat=36.7538, lng=3.0588, distance=20)

    assert [store.name for store, _ in matches] == ["near", "far"]
    assert matches[0][1] < matches[1][1]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stores_in_radius_across_antimeridian(db_session):
    db_session.add_all(
        [
            StoreFactory.create(name="east", latitude=-16.5, longitude=179.99),
            StoreFactory.create(name="west", latitude=-16.5, longitude=-179.99),
        ]
    )
    await db_session.commit()

    matches = await store_ops.get_stores_in_radius(
        db_session, lat=-16.5, lng=179.98, distance=10
    )

    assert [store.name for store, _ in matches] == ["east", "west"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_store_stats_counts_bookings(db_session):
    store = StoreFactory.create()
    offer = OfferFactory.create(store=store)
    db_session.add_all(
        [
            store,
            offer,
            BookingFactory.create(offer=offer, status="completed"),
            BookingFactory.create(offer=offer, user_id="buyer-2"),
        ]
    )
    await db_session.commit()

    stats = await store_ops.get_store_stats(
        db_session, actor=make_user("seller-1"), store_id=store.id
    )

    assert stats["total_offers"] == 1
    assert stats["total_bookings"] == 2
    assert stats["completed_bookings"] == 1
    assert stats["top_selling_offers"][0]["bookings_count"] == 2
    assert sum(m["count"] for m in stats["monthly_bookings"]) == 2
