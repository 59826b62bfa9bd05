"""Transfer ledger helpers."""
from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.transfer import Transfer, TransferDirection, TransferReason


@dataclass(slots=True)
class LedgerTotals:
    """Aggregated value movements across the whole system."""

    total_in: int
    total_out: int
    unrouted: int

    @property
    def balance(self) -> int:
        return self.total_in - self.total_out


async def record_transfer(
    session: AsyncSession,
    *,
    direction: TransferDirection,
    party: str,
    amount: int,
    reason: TransferReason,
    apartment_number: int | None = None,
) -> Transfer:
    """Persist a ledger row and return it."""

    transfer = Transfer(
        id=str(uuid4()),
        apartment_number=apartment_number,
        direction=direction,
        party=party,
        amount=amount,
        reason=reason,
    )
    session.add(transfer)
    await session.flush()
    return transfer


async def totals(session: AsyncSession) -> LedgerTotals:
    """Return inbound, outbound and unrouted sums."""

    stmt = select(Transfer.direction, Transfer.reason, func.coalesce(func.sum(Transfer.amount), 0)).group_by(
        Transfer.direction, Transfer.reason
    )
    result = await session.execute(stmt)

    total_in = total_out = unrouted = 0
    for direction, reason, amount in result.all():
        if direction == TransferDirection.IN:
            total_in += int(amount)
            if reason == TransferReason.UNROUTED:
                unrouted += int(amount)
        else:
            total_out += int(amount)
    return LedgerTotals(total_in=total_in, total_out=total_out, unrouted=unrouted)
