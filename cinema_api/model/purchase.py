from __future__ import annotations

from enum import Enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cinema_api.database import Base
from cinema_api.utils.helper import utcnow


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PurchaseStatusEnum(str, Enum):
    INITIATED = "initiated"
    CREATED = "created"
    EXECUTED = "executed"


class DiscountTypeEnum(str, Enum):
    FLAT = "flat"
    PERCENT = "percent"


QRCODE_PLACEHOLDER = "no-photo.png"


# ---------------------------------------------------------------------------
# PURCHASE
# ---------------------------------------------------------------------------

class Purchase(Base):
    __tablename__ = "purchases"

    purchase_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    showtime_id = Column(Integer, ForeignKey("showtimes.showtime_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(100), nullable=True, index=True)   # JWT subject (external)
    number_tickets = Column(Integer, nullable=False)
    chosen_seats = Column(JSON, nullable=False)
    status = Column(
        SAEnum(PurchaseStatusEnum, name="purchase_status_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PurchaseStatusEnum.INITIATED,
    )
    original_amount = Column(Float, nullable=False)
    discount_type = Column(
        SAEnum(DiscountTypeEnum, name="discount_type_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    discount_amount = Column(Float, nullable=False, default=0)
    payment_amount = Column(Float, nullable=True)
    payment_date = Column(DateTime, nullable=True)
    expired_seat_selection_at = Column(DateTime, nullable=False)
    qrcode_image = Column(String(255), nullable=False, default=QRCODE_PLACEHOLDER)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    showtime = relationship("Showtime", back_populates="purchases")
    seats = relationship("PurchaseSeat", back_populates="purchase", cascade="all,delete-orphan")

    __table_args__ = (
        Index("ix_purchases_showtime_status", "showtime_id", "status"),
    )


# ---------------------------------------------------------------------------
# PURCHASE_SEAT
# One row per seat a live purchase holds; the unique pair rejects a second
# writer for the same seat of the same showtime.
# ---------------------------------------------------------------------------

class PurchaseSeat(Base):
    __tablename__ = "purchase_seats"

    purchase_seat_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    purchase_id = Column(Integer, ForeignKey("purchases.purchase_id", ondelete="CASCADE"), nullable=False)
    showtime_id = Column(Integer, ForeignKey("showtimes.showtime_id", ondelete="CASCADE"), nullable=False)
    seat_label = Column(String(20), nullable=False)

    purchase = relationship("Purchase", back_populates="seats")

    __table_args__ = (
        UniqueConstraint("showtime_id", "seat_label", name="uq_purchase_seat_showtime_seat"),
        Index("ix_purchase_seats_purchase_id", "purchase_id"),
    )
