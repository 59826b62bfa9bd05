"""Apartment registry: registration and lookup."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import DuplicateIdentifier, NotFound
from ..core.identity import CallContext
from ..models.apartment import MAX_APARTMENT_NUMBER, Apartment
from ..models.event import EventType
from ..repositories import apartments as apartments_repo
from ..repositories import events as events_repo
from ..schemas import apartments as schemas
from .locks import apartment_locks
from .notifications import PendingNotifications, hub, to_message

logger = logging.getLogger(__name__)


async def register(
    payload: schemas.ApartmentCreateRequest,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Create an idle apartment owned by the caller."""

    apartment_number = payload.apartment_number
    pending = PendingNotifications()

    async with apartment_locks.hold(apartment_number):
        try:
            async with session.begin():
                if await apartments_repo.exists(session, apartment_number):
                    raise DuplicateIdentifier(f"Apartment {apartment_number} is already registered")
                apartment = await apartments_repo.create_apartment(
                    session, apartment_number=apartment_number, owner=ctx.caller
                )
                await pending.record(
                    session,
                    apartment_number=apartment_number,
                    type=EventType.APARTMENT_REGISTERED,
                    data={"owner": ctx.caller},
                )
        except IntegrityError as exc:
            # Another process registered the same number between the check and the insert.
            raise DuplicateIdentifier(f"Apartment {apartment_number} is already registered") from exc
        except DuplicateIdentifier:
            logger.info("Registration of apartment %s by %s rejected: duplicate", apartment_number, ctx.caller)
            raise

        await hub.publish(pending.messages)

    logger.info("Apartment %s registered by %s", apartment_number, ctx.caller)
    return to_read(apartment)


async def resolve(session: AsyncSession, apartment_number: int, *, for_update: bool = False) -> Apartment:
    """Return the apartment or raise ``NotFound``."""

    if not 0 < apartment_number <= MAX_APARTMENT_NUMBER:
        raise NotFound(f"Apartment {apartment_number} not found")
    apartment = await apartments_repo.get_by_number(session, apartment_number, for_update=for_update)
    if apartment is None:
        raise NotFound(f"Apartment {apartment_number} not found")
    return apartment


async def get(apartment_number: int, session: AsyncSession) -> schemas.ApartmentRead:
    """Read one apartment with its active rental agreement."""

    return to_read(await resolve(session, apartment_number))


def to_read(apartment: Apartment) -> schemas.ApartmentRead:
    agreement = apartment.rental_agreement
    return schemas.ApartmentRead(
        apartment_number=apartment.apartment_number,
        owner=apartment.owner,
        is_for_rent=apartment.is_for_rent,
        is_for_sale=apartment.is_for_sale,
        rent_price=apartment.rent_price,
        sale_price=apartment.sale_price,
        current_tenant=apartment.current_tenant,
        rental_agreement=(
            schemas.RentalAgreementRead(
                tenant=agreement.tenant,
                rent_amount=agreement.rent_amount,
                start_date=agreement.start_date,
            )
            if agreement is not None
            else None
        ),
    )


async def list_events(
    apartment_number: int,
    session: AsyncSession,
    *,
    after_id: int | None = None,
    limit: int = 100,
) -> schemas.EventListResponse:
    """Return the notifications emitted for one apartment, oldest first."""

    await resolve(session, apartment_number)
    rows = await events_repo.list_for_apartment(session, apartment_number, after_id=after_id, limit=limit)
    return schemas.EventListResponse(items=[schemas.EventRead(**to_message(row)) for row in rows])
