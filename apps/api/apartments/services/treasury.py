"""System balance and the fallback for calls that match no operation."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.identity import CallContext
from ..models.transfer import TransferDirection, TransferReason
from ..repositories import transfers as transfers_repo
from ..schemas import treasury as schemas

logger = logging.getLogger(__name__)


async def get_totals(session: AsyncSession) -> schemas.TreasuryResponse:
    """Return the general balance held by the system."""

    totals = await transfers_repo.totals(session)
    return schemas.TreasuryResponse(
        balance=totals.balance,
        total_in=totals.total_in,
        total_out=totals.total_out,
        unrouted=totals.unrouted,
    )


async def accept_unrouted(
    method: str,
    path: str,
    ctx: CallContext,
    session: AsyncSession,
) -> schemas.UnroutedCallResponse:
    """Accept a call that matches no operation without touching any apartment.

    An attached payment is booked to the general balance. Nothing can pay it
    back out, so it is logged loudly.
    """

    if ctx.amount > 0:
        async with session.begin():
            await transfers_repo.record_transfer(
                session,
                direction=TransferDirection.IN,
                party=ctx.caller,
                amount=ctx.amount,
                reason=TransferReason.UNROUTED,
            )
        logger.warning(
            "Unrouted call %s %s from %s retained %s with no way to recover it",
            method,
            path,
            ctx.caller,
            ctx.amount,
        )
    else:
        logger.warning("Unrouted call %s %s from %s accepted without effect", method, path, ctx.caller)

    return schemas.UnroutedCallResponse(retained=ctx.amount)
