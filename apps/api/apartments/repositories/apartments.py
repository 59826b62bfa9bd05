"""Apartment and rental agreement persistence helpers."""
from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.apartment import Apartment
from ..models.rental_agreement import RentalAgreement


async def get_by_number(
    session: AsyncSession,
    apartment_number: int,
    *,
    for_update: bool = False,
) -> Apartment | None:
    """Return an apartment with its rental agreement loaded.

    ``for_update`` takes a row lock on backends that support it; SQLite ignores it.
    """

    stmt: Select[tuple[Apartment]] = select(Apartment).where(Apartment.apartment_number == apartment_number)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def exists(session: AsyncSession, apartment_number: int) -> bool:
    """Return True if the apartment number is already registered."""

    stmt = select(Apartment.apartment_number).where(Apartment.apartment_number == apartment_number)
    result = await session.execute(stmt)
    return result.scalar_one_or_none() is not None


async def create_apartment(session: AsyncSession, *, apartment_number: int, owner: str) -> Apartment:
    """Persist a fresh, idle apartment owned by ``owner``."""

    apartment = Apartment(
        apartment_number=apartment_number,
        owner=owner,
        is_for_rent=False,
        is_for_sale=False,
        rent_price=0,
        sale_price=0,
        current_tenant=None,
        rental_agreement=None,
    )
    session.add(apartment)
    await session.flush()
    return apartment


def start_agreement(apartment: Apartment, *, tenant: str, rent_amount: int) -> RentalAgreement:
    """Attach a new rental agreement to the apartment."""

    agreement = RentalAgreement(
        apartment_number=apartment.apartment_number,
        tenant=tenant,
        rent_amount=rent_amount,
    )
    apartment.rental_agreement = agreement
    return agreement


def end_agreement(apartment: Apartment) -> None:
    """Detach the rental agreement; the orphan is deleted on flush."""

    apartment.rental_agreement = None
