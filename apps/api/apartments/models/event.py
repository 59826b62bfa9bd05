"""Durable notification model."""
from __future__ import annotations

from datetime import datetime
import enum

from sqlalchemy import DateTime, Enum, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType, utcnow


class EventType(str, enum.Enum):
    APARTMENT_REGISTERED = "ApartmentRegistered"
    APARTMENT_LISTED_FOR_RENT = "ApartmentListedForRent"
    RENT_LISTING_REMOVED = "RentListingRemoved"
    APARTMENT_RENTED = "ApartmentRented"
    RENT_PAID = "RentPaid"
    RENTAL_TERMINATED = "RentalTerminated"
    FUNDS_WITHDRAWN = "FundsWithdrawn"
    APARTMENT_LISTED_FOR_SALE = "ApartmentListedForSale"
    SALE_LISTING_REMOVED = "SaleListingRemoved"
    APARTMENT_SOLD = "ApartmentSold"


class ApartmentEvent(Base):
    """State-change notification written in the same transaction as the change."""

    __tablename__ = "apartment_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    apartment_number: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="apartment_event_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    data: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
