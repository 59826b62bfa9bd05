"""Apartment registry and lifecycle endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.identity import CallContext, get_call_context
from ..db.session import get_session
from ..schemas import apartments as schemas
from ..services import lifecycle, registry
from ..services.payouts import PayoutGateway, get_payout_gateway

router = APIRouter()


@router.post("", response_model=schemas.ApartmentRead, status_code=status.HTTP_201_CREATED)
async def register_apartment(
    payload: schemas.ApartmentCreateRequest,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """Register a new apartment owned by the caller."""

    return await registry.register(payload, ctx, session)


@router.get("/{apartment_number}", response_model=schemas.ApartmentRead)
async def get_apartment(
    apartment_number: int,
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """Return one apartment and its active rental agreement."""

    return await registry.get(apartment_number, session)


@router.get("/{apartment_number}/events", response_model=schemas.EventListResponse)
async def list_apartment_events(
    apartment_number: int,
    after_id: int | None = Query(default=None, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
) -> schemas.EventListResponse:
    """Return the notifications emitted for the apartment."""

    return await registry.list_events(apartment_number, session, after_id=after_id, limit=limit)


@router.post("/{apartment_number}/rent-listing", response_model=schemas.ApartmentRead)
async def list_for_rent(
    apartment_number: int,
    payload: schemas.ListingRequest,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """List the apartment for rent."""

    return await lifecycle.list_for_rent(apartment_number, payload, ctx, session)


@router.delete("/{apartment_number}/rent-listing", response_model=schemas.ApartmentRead)
async def unlist_for_rent(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """Remove the rent listing."""

    return await lifecycle.unlist_for_rent(apartment_number, ctx, session)


@router.post("/{apartment_number}/rent", response_model=schemas.ApartmentRead)
async def rent_apartment(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """Rent the apartment with the attached payment."""

    return await lifecycle.rent(apartment_number, ctx, session)


@router.post("/{apartment_number}/rent-payments", response_model=schemas.ApartmentRead)
async def pay_rent(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """Pay rent with the attached payment."""

    return await lifecycle.pay_rent(apartment_number, ctx, session)


@router.post("/{apartment_number}/termination/owner", response_model=schemas.ApartmentRead)
async def terminate_by_owner(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """End the rental as the owner."""

    return await lifecycle.terminate_by_owner(apartment_number, ctx, session)


@router.post("/{apartment_number}/termination/tenant", response_model=schemas.ApartmentRead)
async def terminate_by_tenant(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """End the rental as the tenant."""

    return await lifecycle.terminate_by_tenant(apartment_number, ctx, session)


@router.post("/{apartment_number}/withdrawals", response_model=schemas.WithdrawalResponse)
async def withdraw_rent_funds(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
    payouts: PayoutGateway = Depends(get_payout_gateway),
) -> schemas.WithdrawalResponse:
    """Pay accumulated rent out to the owner."""

    return await lifecycle.withdraw_rent_funds(apartment_number, ctx, session, payouts=payouts)


@router.post("/{apartment_number}/sale-listing", response_model=schemas.ApartmentRead)
async def list_for_sale(
    apartment_number: int,
    payload: schemas.ListingRequest,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """List the apartment for sale."""

    return await lifecycle.list_for_sale(apartment_number, payload, ctx, session)


@router.delete("/{apartment_number}/sale-listing", response_model=schemas.ApartmentRead)
async def unlist_for_sale(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.ApartmentRead:
    """Remove the sale listing."""

    return await lifecycle.unlist_for_sale(apartment_number, ctx, session)


@router.post("/{apartment_number}/purchase", response_model=schemas.ApartmentRead)
async def buy_apartment(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
    payouts: PayoutGateway = Depends(get_payout_gateway),
) -> schemas.ApartmentRead:
    """Buy the apartment with the attached payment."""

    return await lifecycle.buy(apartment_number, ctx, session, payouts=payouts)


@router.get("/{apartment_number}/door", response_model=schemas.DoorAccessResponse)
async def can_open_door(
    apartment_number: int,
    ctx: CallContext = Depends(get_call_context),
    session: AsyncSession = Depends(get_session),
) -> schemas.DoorAccessResponse:
    """Tell whether the caller may open the apartment door."""

    return await lifecycle.can_open_door(apartment_number, ctx, session)
