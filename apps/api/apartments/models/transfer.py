"""Value movement ledger model."""
from __future__ import annotations

from datetime import datetime
import enum

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class TransferDirection(str, enum.Enum):
    IN = "in"
    OUT = "out"


class TransferReason(str, enum.Enum):
    RENT = "rent"
    RENT_PAYMENT = "rent_payment"
    RENT_WITHDRAWAL = "rent_withdrawal"
    SALE_PAYMENT = "sale_payment"
    SALE_SETTLEMENT = "sale_settlement"
    UNROUTED = "unrouted"


class Transfer(Base):
    """Payment accepted by the system (``in``) or paid out by it (``out``)."""

    __tablename__ = "transfers"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_transfers_amount"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    apartment_number: Mapped[int | None] = mapped_column(Integer, index=True)
    direction: Mapped[TransferDirection] = mapped_column(
        Enum(TransferDirection, name="transfer_direction"), nullable=False
    )
    party: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[TransferReason] = mapped_column(Enum(TransferReason, name="transfer_reason"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
