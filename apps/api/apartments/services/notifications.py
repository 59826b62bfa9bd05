"""Durable notification recording and live fan-out to subscribers."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import ApartmentEvent, EventType
from ..repositories import events as events_repo

SendCallable = Callable[[dict], Awaitable[None]]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Subscriber:
    """Live notification consumer, optionally narrowed to one apartment."""

    subscriber_id: str
    send: SendCallable
    apartment_number: int | None = None

    def wants(self, message: dict) -> bool:
        return self.apartment_number is None or message.get("apartment_number") == self.apartment_number


class NotificationHub:
    """Fan out committed notifications to every interested subscriber."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, Subscriber] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, subscriber: Subscriber) -> int:
        """Register a subscriber and return the number now listening."""

        async with self._lock:
            self._subscribers[subscriber.subscriber_id] = subscriber
            return len(self._subscribers)

    async def unsubscribe(self, subscriber_id: str) -> None:
        async with self._lock:
            self._subscribers.pop(subscriber_id, None)

    async def publish(self, messages: list[dict]) -> None:
        """Deliver messages in order; a failing subscriber never blocks the rest."""

        if not messages:
            return

        async with self._lock:
            subscribers = list(self._subscribers.values())

        for message in messages:
            tasks = [subscriber.send(message) for subscriber in subscribers if subscriber.wants(message)]
            if not tasks:
                continue
            results = await asyncio.gather(*tasks, return_exceptions=True)
            failures = [result for result in results if isinstance(result, Exception)]
            if failures:
                logger.warning("Dropped %s notification deliveries for %s", len(failures), message["type"])


@dataclass(slots=True)
class PendingNotifications:
    """Notifications written in the current transaction, published after commit."""

    messages: list[dict] = field(default_factory=list)

    async def record(
        self,
        session: AsyncSession,
        *,
        apartment_number: int,
        type: EventType,
        data: dict[str, Any],
    ) -> ApartmentEvent:
        event = await events_repo.append_event(session, apartment_number=apartment_number, type=type, data=data)
        self.messages.append(to_message(event))
        return event


def to_message(event: ApartmentEvent) -> dict:
    """Serialize a notification row for subscribers and read endpoints."""

    return {
        "id": event.id,
        "type": EventType(event.type).value,
        "apartment_number": event.apartment_number,
        "data": dict(event.data or {}),
        "created_at": event.created_at.isoformat() if event.created_at else None,
    }


hub = NotificationHub()
