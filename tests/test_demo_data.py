import pytest

from app.schemas.search import PropertyFilters
from app.services.demo_data import DEMO_INQUIRIES, DEMO_LISTINGS, DEMO_USERNAME, seed_demo_data


@pytest.mark.asyncio
async def test_seed_creates_demo_seller_and_listings(store):
    await seed_demo_data(store)

    seller = await store.get_user_by_username(DEMO_USERNAME)
    assert seller is not None

    properties = await store.get_properties()
    assert [p.title for p in properties] == [listing["title"] for listing, _, _ in DEMO_LISTINGS]
    assert all(p.seller_id == seller.id for p in properties)

    draft = properties[-1]
    assert draft.status == "draft"
    assert draft.images == []
    assert draft.features is None

    for prop in properties[:-1]:
        assert len(prop.images) == 1
        assert prop.images[0].is_main is True

    rollup = await store.get_properties_by_seller(seller.id)
    assert [p.inquiry_count for p in rollup] == [2, 0, 1, 0, 0]
    assert len(await store.get_inquiries_by_seller(seller.id)) == len(DEMO_INQUIRIES)


@pytest.mark.asyncio
async def test_seed_is_idempotent(store):
    await seed_demo_data(store)
    await seed_demo_data(store)

    assert len(await store.get_properties()) == len(DEMO_LISTINGS)
    seller = await store.get_user_by_username(DEMO_USERNAME)
    assert len(await store.get_inquiries_by_seller(seller.id)) == len(DEMO_INQUIRIES)


@pytest.mark.asyncio
async def test_seeded_listings_are_searchable(store):
    await seed_demo_data(store)

    pools = await store.get_properties(PropertyFilters(features=["Pool"]))
    assert [p.title for p in pools] == ["Modern Family Home", "Oceanfront Cottage"]

    rentals = await store.get_properties(PropertyFilters(listing_type="For Rent", max_price="5000"))
    assert [p.city for p in rentals] == ["New York", "Miami"]
