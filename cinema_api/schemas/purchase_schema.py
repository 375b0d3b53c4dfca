from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from . import DiscountType, ORMModel, PurchaseStatus


class Discount(ORMModel):
    type: DiscountType
    amount: float = Field(..., ge=0)


class PurchaseInitiate(ORMModel):
    showtime_id: int
    number_tickets: int = Field(..., ge=1)


class PurchaseConfirm(ORMModel):
    chosen_seats: List[str] = Field(..., min_length=1)


class PaymentDetails(ORMModel):
    discount: Optional[Discount] = None


class PurchaseOut(ORMModel):
    purchase_id: int
    showtime_id: int
    user_id: Optional[str] = None
    number_tickets: int
    chosen_seats: List[str]
    status: PurchaseStatus
    original_amount: float
    discount_type: Optional[DiscountType] = None
    discount_amount: float = 0
    payment_amount: Optional[float] = None
    payment_date: Optional[datetime] = None
    expired_seat_selection_at: datetime
    qrcode_image: str
    created_at: datetime
    updated_at: Optional[datetime] = None
