"""Apartment model."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .rental_agreement import RentalAgreement


# Upper bound of the 32-bit identifier column on PostgreSQL.
MAX_APARTMENT_NUMBER = 2**31 - 1


class Apartment(Base):
    """Ownership, occupancy and listing state of one registered unit."""

    __tablename__ = "apartments"
    __table_args__ = (
        CheckConstraint("apartment_number > 0", name="ck_apartments_number_positive"),
        CheckConstraint("rent_price >= 0", name="ck_apartments_rent_price"),
        CheckConstraint("sale_price >= 0", name="ck_apartments_sale_price"),
        CheckConstraint("NOT (is_for_rent AND is_for_sale)", name="ck_apartments_single_listing"),
    )

    apartment_number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    owner: Mapped[str] = mapped_column(String, nullable=False)
    is_for_rent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_for_sale: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rent_price: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    sale_price: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    current_tenant: Mapped[str | None] = mapped_column(String)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    rental_agreement: Mapped["RentalAgreement | None"] = relationship(
        "RentalAgreement",
        back_populates="apartment",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
