"""Schemas for apartment registry and lifecycle endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..core.identity import MAX_AMOUNT
from ..models.apartment import MAX_APARTMENT_NUMBER


class ApartmentCreateRequest(BaseModel):
    apartment_number: int = Field(
        ..., gt=0, le=MAX_APARTMENT_NUMBER, description="Identifier chosen by the registrant"
    )


class ListingRequest(BaseModel):
    price: int = Field(..., ge=0, le=MAX_AMOUNT, description="Asking rent or sale price")


class RentalAgreementRead(BaseModel):
    tenant: str
    rent_amount: int
    start_date: datetime


class ApartmentRead(BaseModel):
    apartment_number: int
    owner: str
    is_for_rent: bool
    is_for_sale: bool
    rent_price: int
    sale_price: int
    current_tenant: str | None = None
    rental_agreement: RentalAgreementRead | None = None


class WithdrawalResponse(BaseModel):
    apartment_number: int
    recipient: str
    amount: int
    transfer_id: str


class DoorAccessResponse(BaseModel):
    apartment_number: int
    caller: str
    can_open: bool


class EventRead(BaseModel):
    id: int
    type: str
    apartment_number: int
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class EventListResponse(BaseModel):
    items: list[EventRead]
