"""Tests for apartment registration and lookup."""
from __future__ import annotations

import pytest

from apartments.core.errors import DuplicateIdentifier, NotFound
from apartments.core.identity import CallContext
from apartments.models.event import EventType
from apartments.schemas import apartments as schemas
from apartments.services import lifecycle, registry

from conftest import assert_invariants, call, read, register


@pytest.mark.asyncio
async def test_register_creates_idle_apartment_owned_by_caller():
    created = await register(1, "alice")

    assert created.apartment_number == 1
    assert created.owner == "alice"
    assert created.is_for_rent is False
    assert created.is_for_sale is False
    assert created.rent_price == 0
    assert created.sale_price == 0
    assert created.current_tenant is None
    assert created.rental_agreement is None
    assert_invariants(created)

    events = await call(registry.list_events, 1)
    assert [item.type for item in events.items] == [EventType.APARTMENT_REGISTERED.value]
    assert events.items[0].data == {"owner": "alice"}


@pytest.mark.asyncio
async def test_duplicate_registration_keeps_first_record():
    await register(1, "alice")
    await call(lifecycle.list_for_rent, 1, schemas.ListingRequest(price=100), CallContext("alice"))
    before = await read(1)

    with pytest.raises(DuplicateIdentifier) as exc:
        await register(1, "mallory")

    assert exc.value.status_code == 409
    assert await read(1) == before
    events = await call(registry.list_events, 1)
    assert [item.type for item in events.items].count(EventType.APARTMENT_REGISTERED.value) == 1


@pytest.mark.asyncio
async def test_get_unknown_apartment_raises_not_found():
    with pytest.raises(NotFound) as exc:
        await read(404)

    assert exc.value.status_code == 404
    assert exc.value.kind == "NotFound"


@pytest.mark.asyncio
async def test_list_events_for_unknown_apartment_raises_not_found():
    with pytest.raises(NotFound):
        await call(registry.list_events, 7)


@pytest.mark.asyncio
async def test_list_events_pages_with_after_id():
    await register(3, "alice")
    owner = CallContext("alice")
    await call(lifecycle.list_for_sale, 3, schemas.ListingRequest(price=10), owner)
    await call(lifecycle.unlist_for_sale, 3, owner)

    everything = await call(registry.list_events, 3)
    assert [item.type for item in everything.items] == [
        "ApartmentRegistered",
        "ApartmentListedForSale",
        "SaleListingRemoved",
    ]
    ids = [item.id for item in everything.items]
    assert ids == sorted(ids)

    tail = await call(registry.list_events, 3, after_id=ids[0], limit=1)
    assert [item.type for item in tail.items] == ["ApartmentListedForSale"]
