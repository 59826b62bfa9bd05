"""Live notification stream."""
from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..services.notifications import Subscriber, hub

router = APIRouter()


@router.websocket("/ws")
async def notifications_endpoint(websocket: WebSocket) -> None:
    """Push committed apartment notifications, optionally for one apartment only."""

    subscriber_id = websocket.query_params.get("subscriber_id") or str(uuid4())
    raw_filter = websocket.query_params.get("apartment_number")
    apartment_number = int(raw_filter) if raw_filter and raw_filter.isdigit() else None
    await websocket.accept()

    listeners = await hub.subscribe(
        Subscriber(subscriber_id=subscriber_id, send=websocket.send_json, apartment_number=apartment_number)
    )
    await websocket.send_json(
        {
            "type": "subscribed",
            "subscriber_id": subscriber_id,
            "apartment_number": apartment_number,
            "listeners": listeners,
        }
    )

    try:
        while True:
            # Inbound messages carry no meaning; reading only detects disconnects.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await hub.unsubscribe(subscriber_id)
