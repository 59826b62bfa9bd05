"""Tests for the notification hub and websocket stream."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from apartments.main import app
from apartments.services.notifications import NotificationHub, Subscriber


class DummySubscriber:
    def __init__(self, subscriber_id: str) -> None:
        self.subscriber_id = subscriber_id
        self.messages: list[dict] = []

    async def send(self, message: dict) -> None:
        self.messages.append(message)


class BrokenSubscriber:
    async def send(self, message: dict) -> None:
        raise ConnectionError("socket closed")


@pytest.mark.asyncio
async def test_hub_fans_out_in_order_and_honours_filters():
    hub = NotificationHub()
    everything = DummySubscriber("all")
    only_two = DummySubscriber("two")

    assert await hub.subscribe(Subscriber("all", everything.send)) == 1
    assert await hub.subscribe(Subscriber("two", only_two.send, apartment_number=2)) == 2

    messages = [
        {"id": 1, "type": "ApartmentRegistered", "apartment_number": 1},
        {"id": 2, "type": "ApartmentRegistered", "apartment_number": 2},
        {"id": 3, "type": "ApartmentListedForSale", "apartment_number": 2},
    ]
    await hub.publish(messages)

    assert [m["id"] for m in everything.messages] == [1, 2, 3]
    assert [m["id"] for m in only_two.messages] == [2, 3]

    await hub.unsubscribe("two")
    await hub.publish([{"id": 4, "type": "SaleListingRemoved", "apartment_number": 2}])
    assert [m["id"] for m in only_two.messages] == [2, 3]
    assert everything.messages[-1]["id"] == 4


@pytest.mark.asyncio
async def test_hub_survives_failing_subscriber():
    hub = NotificationHub()
    healthy = DummySubscriber("ok")
    await hub.subscribe(Subscriber("broken", BrokenSubscriber().send))
    await hub.subscribe(Subscriber("ok", healthy.send))

    await hub.publish([{"id": 1, "type": "RentPaid", "apartment_number": 1}])

    assert healthy.messages == [{"id": 1, "type": "RentPaid", "apartment_number": 1}]


def test_websocket_streams_committed_notifications():
    with TestClient(app) as client:
        with client.websocket_connect("/api/notifications/ws?subscriber_id=watcher&apartment_number=12") as ws:
            subscribed = ws.receive_json()
            assert subscribed["type"] == "subscribed"
            assert subscribed["apartment_number"] == 12

            headers = {"X-Caller-Id": "alice"}
            assert client.post("/api/apartments", json={"apartment_number": 11}, headers=headers).status_code == 201
            assert client.post("/api/apartments", json={"apartment_number": 12}, headers=headers).status_code == 201
            response = client.post("/api/apartments/12/sale-listing", json={"price": 300}, headers=headers)
            assert response.status_code == 200

            registered = ws.receive_json()
            assert registered["type"] == "ApartmentRegistered"
            assert registered["apartment_number"] == 12
            assert registered["data"] == {"owner": "alice"}

            listed = ws.receive_json()
            assert listed["type"] == "ApartmentListedForSale"
            assert listed["data"] == {"owner": "alice", "price": 300}
            assert listed["id"] > registered["id"]
