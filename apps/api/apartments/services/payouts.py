"""Value-transfer gateways used to pay owners and sellers.

The ledger gateway books the payout in the caller's transaction. The webhook
gateway books it the same way and then asks an external settlement service to
deliver the funds; a rejected delivery raises ``TransferFailed`` so the whole
operation rolls back, ledger row included.
"""
from __future__ import annotations

import logging
from typing import Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import TransferFailed
from ..models.transfer import Transfer, TransferDirection, TransferReason
from ..repositories import transfers as transfers_repo

logger = logging.getLogger(__name__)


class PayoutGateway(Protocol):
    async def transfer(
        self,
        session: AsyncSession,
        *,
        recipient: str,
        amount: int,
        apartment_number: int,
        reason: TransferReason,
    ) -> Transfer: ...


class LedgerPayoutGateway:
    """Record payouts in the transfer ledger only."""

    async def transfer(
        self,
        session: AsyncSession,
        *,
        recipient: str,
        amount: int,
        apartment_number: int,
        reason: TransferReason,
    ) -> Transfer:
        return await transfers_repo.record_transfer(
            session,
            direction=TransferDirection.OUT,
            party=recipient,
            amount=amount,
            reason=reason,
            apartment_number=apartment_number,
        )


class WebhookPayoutGateway:
    """Deliver payouts through an external settlement endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("payout webhook URL is not configured")
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def transfer(
        self,
        session: AsyncSession,
        *,
        recipient: str,
        amount: int,
        apartment_number: int,
        reason: TransferReason,
    ) -> Transfer:
        record = await transfers_repo.record_transfer(
            session,
            direction=TransferDirection.OUT,
            party=recipient,
            amount=amount,
            reason=reason,
            apartment_number=apartment_number,
        )
        payload = {
            "transfer_id": record.id,
            "recipient": recipient,
            "amount": amount,
            "apartment_number": apartment_number,
            "reason": reason.value,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Payout %s of %s to %s failed: %s", record.id, amount, recipient, exc)
            raise TransferFailed(f"Payout of {amount} to {recipient} was rejected") from exc
        return record


def get_payout_gateway() -> PayoutGateway:
    """FastAPI dependency returning the configured gateway."""

    if settings.payout_provider == "webhook":
        return WebhookPayoutGateway(settings.payout_webhook_url, timeout=settings.payout_timeout_seconds)
    return LedgerPayoutGateway()
