"""Expose ORM models."""
from .apartment import Apartment
from .base import Base
from .event import ApartmentEvent, EventType
from .rental_agreement import RentalAgreement
from .transfer import Transfer, TransferDirection, TransferReason

__all__ = [
    "Apartment",
    "ApartmentEvent",
    "Base",
    "EventType",
    "RentalAgreement",
    "Transfer",
    "TransferDirection",
    "TransferReason",
]
