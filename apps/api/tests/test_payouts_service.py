"""Tests for value-transfer gateways."""
from __future__ import annotations

import json

import httpx
import pytest
from sqlalchemy import func, select

from apartments.core.errors import TransferFailed
from apartments.db.session import SessionLocal
from apartments.models.transfer import Transfer, TransferDirection, TransferReason
from apartments.services import payouts


async def count_transfers() -> int:
    async with SessionLocal() as session:
        result = await session.execute(select(func.count(Transfer.id)))
        return result.scalar_one()


@pytest.mark.asyncio
async def test_ledger_gateway_records_outbound_transfer():
    gateway = payouts.LedgerPayoutGateway()

    async with SessionLocal() as session:
        async with session.begin():
            record = await gateway.transfer(
                session,
                recipient="alice",
                amount=250,
                apartment_number=1,
                reason=TransferReason.RENT_WITHDRAWAL,
            )

    assert record.direction == TransferDirection.OUT
    assert record.party == "alice"
    assert record.amount == 250
    assert await count_transfers() == 1


@pytest.mark.asyncio
async def test_webhook_gateway_posts_payout():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"status": "settled"})

    gateway = payouts.WebhookPayoutGateway(
        "https://settlement.test/payouts", transport=httpx.MockTransport(handler)
    )

    async with SessionLocal() as session:
        async with session.begin():
            record = await gateway.transfer(
                session,
                recipient="alice",
                amount=500,
                apartment_number=2,
                reason=TransferReason.SALE_SETTLEMENT,
            )

    assert seen == [
        {
            "transfer_id": record.id,
            "recipient": "alice",
            "amount": 500,
            "apartment_number": 2,
            "reason": "sale_settlement",
        }
    ]
    assert await count_transfers() == 1


@pytest.mark.asyncio
async def test_webhook_gateway_rejection_raises_and_rolls_back():
    gateway = payouts.WebhookPayoutGateway(
        "https://settlement.test/payouts",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )

    with pytest.raises(TransferFailed) as exc:
        async with SessionLocal() as session:
            async with session.begin():
                await gateway.transfer(
                    session,
                    recipient="alice",
                    amount=500,
                    apartment_number=2,
                    reason=TransferReason.SALE_SETTLEMENT,
                )

    assert isinstance(exc.value.__cause__, httpx.HTTPStatusError)
    assert await count_transfers() == 0


def test_webhook_gateway_requires_url():
    with pytest.raises(ValueError):
        payouts.WebhookPayoutGateway("")


def test_gateway_selection_follows_settings(monkeypatch):
    monkeypatch.setattr(payouts.settings, "payout_provider", "ledger")
    assert isinstance(payouts.get_payout_gateway(), payouts.LedgerPayoutGateway)

    monkeypatch.setattr(payouts.settings, "payout_provider", "webhook")
    monkeypatch.setattr(payouts.settings, "payout_webhook_url", "https://settlement.test/payouts")
    assert isinstance(payouts.get_payout_gateway(), payouts.WebhookPayoutGateway)
