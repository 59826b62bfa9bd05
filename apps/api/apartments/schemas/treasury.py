"""Schemas for the system balance and the unrouted-call fallback."""
from __future__ import annotations

from pydantic import BaseModel, Field


class TreasuryResponse(BaseModel):
    balance: int = Field(..., description="Accepted payments minus payouts")
    total_in: int
    total_out: int
    unrouted: int = Field(..., description="Payments retained from calls matching no operation")


class UnroutedCallResponse(BaseModel):
    status: str = "accepted"
    retained: int = 0
