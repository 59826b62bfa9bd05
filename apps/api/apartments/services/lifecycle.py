"""Apartment lifecycle: listing, renting, selling and rent accounting.

Every operation resolves the apartment under its per-apartment lock, then
checks authorization, state and payment in that order before mutating
anything. Mutations, ledger rows and notification rows share one transaction,
so a rejected check or a failed payout leaves nothing behind. Notifications
reach live subscribers only after the commit.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import (
    ApartmentError,
    BalanceLimitExceeded,
    InsufficientPayment,
    InvalidState,
    NoFundsAvailable,
    Unauthorized,
)
from ..core.identity import MAX_AMOUNT, CallContext
from ..models.apartment import Apartment
from ..models.event import EventType
from ..models.transfer import TransferDirection, TransferReason
from ..repositories import apartments as apartments_repo
from ..repositories import transfers as transfers_repo
from ..schemas import apartments as schemas
from . import registry
from .locks import apartment_locks
from .notifications import PendingNotifications, hub
from .payouts import LedgerPayoutGateway, PayoutGateway

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Transition:
    session: AsyncSession
    apartment: Apartment
    notifications: PendingNotifications = field(default_factory=PendingNotifications)

    async def emit(self, type: EventType, **data: object) -> None:
        await self.notifications.record(
            self.session,
            apartment_number=self.apartment.apartment_number,
            type=type,
            data=data,
        )

    async def accept_payment(self, payer: str, amount: int, reason: TransferReason) -> None:
        if amount <= 0:
            return
        await transfers_repo.record_transfer(
            self.session,
            direction=TransferDirection.IN,
            party=payer,
            amount=amount,
            reason=reason,
            apartment_number=self.apartment.apartment_number,
        )


@asynccontextmanager
async def _transition(
    session: AsyncSession,
    apartment_number: int,
    operation: str,
    ctx: CallContext,
) -> AsyncIterator[_Transition]:
    async with apartment_locks.hold(apartment_number):
        try:
            async with session.begin():
                apartment = await registry.resolve(session, apartment_number, for_update=True)
                step = _Transition(session=session, apartment=apartment)
                yield step
                await session.flush()
        except ApartmentError as exc:
            logger.info(
                "%s on apartment %s by %s rejected: %s (%s)",
                operation,
                apartment_number,
                ctx.caller,
                exc.kind,
                exc.detail,
            )
            raise

        await hub.publish(step.notifications.messages)

    logger.info("%s on apartment %s by %s", operation, apartment_number, ctx.caller)


def _require_owner(apartment: Apartment, ctx: CallContext) -> None:
    if ctx.caller != apartment.owner:
        raise Unauthorized(f"Only the owner of apartment {apartment.apartment_number} may do this")


def _require_tenant(apartment: Apartment, ctx: CallContext) -> None:
    if apartment.current_tenant is None or ctx.caller != apartment.current_tenant:
        raise Unauthorized(f"Only the tenant of apartment {apartment.apartment_number} may do this")


def _require_payment(ctx: CallContext, price: int) -> None:
    if ctx.amount < price:
        raise InsufficientPayment(f"Attached {ctx.amount} is below the required {price}")


def _gateway(payouts: PayoutGateway | None) -> PayoutGateway:
    return payouts if payouts is not None else LedgerPayoutGateway()


async def list_for_rent(
    apartment_number: int,
    payload: schemas.ListingRequest,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Offer an idle apartment for rent at the given price."""

    async with _transition(session, apartment_number, "list_for_rent", ctx) as step:
        apartment = step.apartment
        _require_owner(apartment, ctx)
        if apartment.is_for_rent:
            raise InvalidState(f"Apartment {apartment_number} is already listed for rent")
        if apartment.is_for_sale:
            raise InvalidState(f"Apartment {apartment_number} is listed for sale")
        if apartment.current_tenant is not None:
            raise InvalidState(f"Apartment {apartment_number} is occupied")

        apartment.is_for_rent = True
        apartment.rent_price = payload.price
        await step.emit(EventType.APARTMENT_LISTED_FOR_RENT, owner=apartment.owner, price=payload.price)

    return registry.to_read(apartment)


async def unlist_for_rent(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Withdraw a rent listing and reset the asking rent."""

    async with _transition(session, apartment_number, "unlist_for_rent", ctx) as step:
        apartment = step.apartment
        _require_owner(apartment, ctx)
        if not apartment.is_for_rent:
            raise InvalidState(f"Apartment {apartment_number} is not listed for rent")

        apartment.is_for_rent = False
        apartment.rent_price = 0
        await step.emit(EventType.RENT_LISTING_REMOVED, owner=apartment.owner)

    return registry.to_read(apartment)


async def rent(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Take a listed apartment; the attached payment opens the rent balance."""

    async with _transition(session, apartment_number, "rent", ctx) as step:
        apartment = step.apartment
        if not apartment.is_for_rent:
            raise InvalidState(f"Apartment {apartment_number} is not listed for rent")
        if apartment.current_tenant is not None:
            raise InvalidState(f"Apartment {apartment_number} is already rented")
        _require_payment(ctx, apartment.rent_price)

        apartment.current_tenant = ctx.caller
        apartment.is_for_rent = False
        apartments_repo.start_agreement(apartment, tenant=ctx.caller, rent_amount=ctx.amount)
        await step.accept_payment(ctx.caller, ctx.amount, TransferReason.RENT)
        await step.emit(
            EventType.APARTMENT_RENTED,
            tenant=ctx.caller,
            amount=ctx.amount,
            rent_price=apartment.rent_price,
        )

    return registry.to_read(apartment)


async def pay_rent(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Add the attached payment to the tenant's rent balance."""

    async with _transition(session, apartment_number, "pay_rent", ctx) as step:
        apartment = step.apartment
        _require_tenant(apartment, ctx)
        _require_payment(ctx, apartment.rent_price)

        agreement = apartment.rental_agreement
        if agreement.rent_amount + ctx.amount > MAX_AMOUNT:
            raise BalanceLimitExceeded(
                f"Rent balance of apartment {apartment_number} would exceed {MAX_AMOUNT}; withdraw first"
            )
        agreement.rent_amount += ctx.amount
        await step.accept_payment(ctx.caller, ctx.amount, TransferReason.RENT_PAYMENT)
        await step.emit(
            EventType.RENT_PAID,
            tenant=ctx.caller,
            amount=ctx.amount,
            balance=agreement.rent_amount,
        )

    return registry.to_read(apartment)


async def terminate_by_owner(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """End the tenancy on the owner's initiative."""

    async with _transition(session, apartment_number, "terminate_by_owner", ctx) as step:
        apartment = step.apartment
        _require_owner(apartment, ctx)
        if apartment.current_tenant is None:
            raise InvalidState(f"Apartment {apartment_number} has no tenant")

        await _end_tenancy(step, terminated_by="owner")

    return registry.to_read(apartment)


async def terminate_by_tenant(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """End the tenancy on the tenant's initiative."""

    async with _transition(session, apartment_number, "terminate_by_tenant", ctx) as step:
        _require_tenant(step.apartment, ctx)
        await _end_tenancy(step, terminated_by="tenant")

    return registry.to_read(step.apartment)


async def _end_tenancy(step: _Transition, *, terminated_by: str) -> None:
    """Clear tenancy and rent listing and drop the agreement.

    Rent the owner never withdrew stays in the general balance.
    """

    apartment = step.apartment
    tenant = apartment.current_tenant
    agreement = apartment.rental_agreement
    forfeited = agreement.rent_amount if agreement is not None else 0
    if forfeited:
        logger.warning(
            "Apartment %s terminated with %s unwithdrawn; retained by the system",
            apartment.apartment_number,
            forfeited,
        )

    apartment.current_tenant = None
    apartment.is_for_rent = False
    apartment.rent_price = 0
    apartments_repo.end_agreement(apartment)
    await step.emit(EventType.RENTAL_TERMINATED, tenant=tenant, terminated_by=terminated_by)


async def withdraw_rent_funds(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
    *,
    payouts: PayoutGateway | None = None,
) -> schemas.WithdrawalResponse:
    """Pay the accumulated rent balance out to the owner."""

    async with _transition(session, apartment_number, "withdraw_rent_funds", ctx) as step:
        apartment = step.apartment
        _require_owner(apartment, ctx)
        agreement = apartment.rental_agreement
        if agreement is None or agreement.rent_amount <= 0:
            raise NoFundsAvailable(f"Apartment {apartment_number} has no rent funds to withdraw")

        amount = agreement.rent_amount
        agreement.rent_amount = 0
        await step.emit(EventType.FUNDS_WITHDRAWN, owner=ctx.caller, amount=amount)
        # Payout last: no write may follow it.
        await session.flush()
        transfer = await _gateway(payouts).transfer(
            session,
            recipient=ctx.caller,
            amount=amount,
            apartment_number=apartment_number,
            reason=TransferReason.RENT_WITHDRAWAL,
        )

    return schemas.WithdrawalResponse(
        apartment_number=apartment_number,
        recipient=ctx.caller,
        amount=amount,
        transfer_id=transfer.id,
    )


async def list_for_sale(
    apartment_number: int,
    payload: schemas.ListingRequest,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Offer an idle apartment for sale at the given price."""

    async with _transition(session, apartment_number, "list_for_sale", ctx) as step:
        apartment = step.apartment
        _require_owner(apartment, ctx)
        if apartment.is_for_rent:
            raise InvalidState(f"Apartment {apartment_number} is listed for rent")
        if apartment.is_for_sale:
            raise InvalidState(f"Apartment {apartment_number} is already listed for sale")
        if apartment.current_tenant is not None:
            raise InvalidState(f"Apartment {apartment_number} is occupied")

        apartment.is_for_sale = True
        apartment.sale_price = payload.price
        await step.emit(EventType.APARTMENT_LISTED_FOR_SALE, owner=apartment.owner, price=payload.price)

    return registry.to_read(apartment)


async def unlist_for_sale(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.ApartmentRead:
    """Withdraw a sale listing and reset the asking price."""

    async with _transition(session, apartment_number, "unlist_for_sale", ctx) as step:
        apartment = step.apartment
        _require_owner(apartment, ctx)
        if not apartment.is_for_sale:
            raise InvalidState(f"Apartment {apartment_number} is not listed for sale")

        apartment.is_for_sale = False
        apartment.sale_price = 0
        await step.emit(EventType.SALE_LISTING_REMOVED, owner=apartment.owner)

    return registry.to_read(apartment)


async def buy(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
    *,
    payouts: PayoutGateway | None = None,
) -> schemas.ApartmentRead:
    """Purchase a listed apartment, settling the full payment to the seller."""

    async with _transition(session, apartment_number, "buy", ctx) as step:
        apartment = step.apartment
        if not apartment.is_for_sale:
            raise InvalidState(f"Apartment {apartment_number} is not listed for sale")
        _require_payment(ctx, apartment.sale_price)

        seller = apartment.owner
        apartment.owner = ctx.caller
        apartment.is_for_sale = False
        apartment.sale_price = 0
        await step.accept_payment(ctx.caller, ctx.amount, TransferReason.SALE_PAYMENT)
        await step.emit(EventType.APARTMENT_SOLD, seller=seller, buyer=ctx.caller, amount=ctx.amount)
        # Payout last: no write may follow it.
        await session.flush()
        if ctx.amount > 0:
            await _gateway(payouts).transfer(
                session,
                recipient=seller,
                amount=ctx.amount,
                apartment_number=apartment_number,
                reason=TransferReason.SALE_SETTLEMENT,
            )

    return registry.to_read(apartment)


async def can_open_door(
    apartment_number: int,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.DoorAccessResponse:
    """Owner of a vacant apartment or its current tenant may open the door."""

    apartment = await registry.resolve(session, apartment_number)
    is_tenant = apartment.current_tenant is not None and ctx.caller == apartment.current_tenant
    is_vacant_owner = ctx.caller == apartment.owner and apartment.current_tenant is None
    return schemas.DoorAccessResponse(
        apartment_number=apartment_number,
        caller=ctx.caller,
        can_open=is_tenant or is_vacant_owner,
    )
