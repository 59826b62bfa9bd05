"""Rental agreement model."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .apartment import Apartment


class RentalAgreement(Base):
    """Accounting record for the active tenancy of an apartment."""

    __tablename__ = "rental_agreements"
    __table_args__ = (CheckConstraint("rent_amount >= 0", name="ck_rental_agreements_rent_amount"),)

    apartment_number: Mapped[int] = mapped_column(
        ForeignKey("apartments.apartment_number", ondelete="CASCADE"), primary_key=True
    )
    tenant: Mapped[str] = mapped_column(String, nullable=False)
    rent_amount: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    apartment: Mapped["Apartment"] = relationship("Apartment", back_populates="rental_agreement")
