"""Notification outbox helpers."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import ApartmentEvent, EventType


async def append_event(
    session: AsyncSession,
    *,
    apartment_number: int,
    type: EventType,
    data: dict[str, Any],
) -> ApartmentEvent:
    """Write a notification row and flush so it receives its ordering id."""

    event = ApartmentEvent(apartment_number=apartment_number, type=type, data=data)
    session.add(event)
    await session.flush()
    return event


async def list_for_apartment(
    session: AsyncSession,
    apartment_number: int,
    *,
    after_id: int | None = None,
    limit: int = 100,
) -> list[ApartmentEvent]:
    """Return notifications for one apartment in emission order."""

    stmt = select(ApartmentEvent).where(ApartmentEvent.apartment_number == apartment_number)
    if after_id is not None:
        stmt = stmt.where(ApartmentEvent.id > after_id)
    stmt = stmt.order_by(ApartmentEvent.id.asc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())
