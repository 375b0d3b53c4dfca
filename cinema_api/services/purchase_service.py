"""Purchase lifecycle: seat hold, confirmation and payment.

    initiated --create()--> created --execute()--> executed

Seats are handed out by `seat_allocator.allocate` at initiation. While a
purchase is `initiated` its seats are held up to and including `expired_seat_selection_at`;
after that they go back to the pool on the next allocation for the showtime.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cinema_api.crud.purchase_crud import purchase_crud
from cinema_api.crud.showtime_crud import showtime_crud
from cinema_api.model.purchase import (
    DiscountTypeEnum,
    Purchase,
    PurchaseSeat,
    PurchaseStatusEnum,
)
from cinema_api.schemas.purchase_schema import PaymentDetails
from cinema_api.services.config import SchedulingConfig
from cinema_api.services.errors import (
    InsufficientCapacityError,
    InvalidSeatSelectionError,
    InvalidStateError,
    SeatSelectionExpiredError,
    SeatsUnavailableError,
    TicketLimitError,
)
from cinema_api.services.seat_allocator import SeatGrid, allocate
from cinema_api.utils.helper import utcnow
from cinema_api.utils.locks import showtime_locks
from cinema_api.utils.qrcode_generator import generate_qr_code

logger = logging.getLogger(__name__)

# A unique-constraint loss means another process took the seats between our
# read and our write; one fresh read is enough to either succeed or report.
ALLOCATION_ATTEMPTS = 2


def apply_discount(original_amount: float, discount_type: Optional[str], discount_amount: float) -> float:
    if discount_type == DiscountTypeEnum.FLAT:
        amount = original_amount - discount_amount
    elif discount_type == DiscountTypeEnum.PERCENT:
        amount = original_amount * (1 - discount_amount / 100)
    else:
        amount = original_amount
    return max(amount, 0.0)


class PurchaseService:
    def __init__(
        self,
        db: Session,
        config: SchedulingConfig,
        clock: Callable[[], datetime] = utcnow,
        qr_generator: Callable[[str, str], Optional[str]] = generate_qr_code,
    ) -> None:
        self._db = db
        self._config = config
        self._clock = clock
        self._qr_generator = qr_generator

    # ---------------- INITIATE ----------------
    def initiate(self, showtime_id: int, number_tickets: int, user_id: Optional[str] = None) -> Purchase:
        """Hold `number_tickets` seats for a showtime.

        Raises:
            TicketLimitError: If number_tickets is outside 1..max_tickets_per_purchase.
            HTTPException(404): If the showtime does not exist.
            SeatsUnavailableError: If fewer seats than requested are free.
        """
        if not 1 <= number_tickets <= self._config.max_tickets_per_purchase:
            raise TicketLimitError(self._config.max_tickets_per_purchase)

        showtime = showtime_crud.get(self._db, showtime_id)
        grid = SeatGrid.from_hall(showtime.hall)
        original_amount = showtime.movie.ticket_price * number_tickets

        remaining = grid.capacity
        for attempt in range(1, ALLOCATION_ATTEMPTS + 1):
            with showtime_locks.hold(showtime_id):
                now = self._clock()
                released = purchase_crud.release_expired_holds(self._db, now, showtime_id)
                if released:
                    logger.info("purchase.holds_released showtime_id=%s seats=%s", showtime_id, released)
                taken = purchase_crud.taken_seats(self._db, showtime_id, now)
                remaining = grid.capacity - len(taken)

                try:
                    seats = allocate(grid, number_tickets, taken)
                except InsufficientCapacityError as e:
                    self._db.commit()
                    raise SeatsUnavailableError(showtime_id, number_tickets, e.remaining) from e

                purchase = Purchase(
                    showtime_id=showtime_id,
                    user_id=user_id,
                    number_tickets=number_tickets,
                    chosen_seats=seats,
                    status=PurchaseStatusEnum.INITIATED,
                    original_amount=original_amount,
                    discount_amount=0,
                    expired_seat_selection_at=now + timedelta(minutes=self._config.seat_selection_window_minutes),
                    seats=[PurchaseSeat(showtime_id=showtime_id, seat_label=label) for label in seats],
                )
                self._db.add(purchase)
                try:
                    self._db.commit()
                except IntegrityError:
                    self._db.rollback()
                    logger.warning(
                        "purchase.seat_conflict showtime_id=%s attempt=%s seats=%s",
                        showtime_id, attempt, seats,
                    )
                    continue

            self._db.refresh(purchase)
            logger.info(
                "purchase.initiated purchase_id=%s showtime_id=%s seats=%s expires_at=%s",
                purchase.purchase_id, showtime_id, seats, purchase.expired_seat_selection_at.isoformat(),
            )
            return purchase

        raise SeatsUnavailableError(showtime_id, number_tickets, remaining)

    # ---------------- CREATE ----------------
    def create(self, purchase_id: int, chosen_seats: List[str]) -> Purchase:
        """Confirm the seats of an initiated purchase.

        Raises:
            HTTPException(404): If the purchase does not exist.
            InvalidStateError: If the purchase is not initiated.
            SeatSelectionExpiredError: If the seat-selection window has passed.
            InvalidSeatSelectionError: If the seats do not match what the purchase holds.
        """
        purchase = purchase_crud.get(self._db, purchase_id, for_update=True)
        if purchase.status != PurchaseStatusEnum.INITIATED:
            raise InvalidStateError("Purchase with given ID is not in initiated status")

        with showtime_locks.hold(purchase.showtime_id):
            if purchase.expired_seat_selection_at < self._clock():
                raise SeatSelectionExpiredError()

            if len(set(chosen_seats)) != len(chosen_seats):
                raise InvalidSeatSelectionError("Chosen seats must not repeat")
            if len(chosen_seats) != purchase.number_tickets:
                raise InvalidSeatSelectionError("Number of chosen seats is not correct")

            grid = SeatGrid.from_hall(purchase.showtime.hall)
            if any(label not in grid for label in chosen_seats):
                raise InvalidSeatSelectionError("Seat label is invalid")

            held = {seat.seat_label for seat in purchase.seats}
            if not set(chosen_seats) <= held:
                raise InvalidSeatSelectionError("Seat is not held by this purchase")

            purchase.chosen_seats = list(chosen_seats)
            purchase.status = PurchaseStatusEnum.CREATED
            self._db.add(purchase)
            self._db.commit()

        self._db.refresh(purchase)
        logger.info("purchase.created purchase_id=%s seats=%s", purchase_id, purchase.chosen_seats)
        return purchase

    # ---------------- EXECUTE ----------------
    def execute(self, purchase_id: int, payment_details: Optional[PaymentDetails] = None) -> Purchase:
        """Record payment for a created purchase and attach its QR code.

        A QR code that cannot be written does not block the payment; the
        purchase keeps the placeholder image and a warning is logged.

        Raises:
            HTTPException(404): If the purchase does not exist.
            InvalidStateError: If the purchase is not created.
        """
        purchase = purchase_crud.get(self._db, purchase_id, for_update=True)
        if purchase.status != PurchaseStatusEnum.CREATED:
            raise InvalidStateError("Purchase with given ID is not in created status")

        discount = payment_details.discount if payment_details else None
        if discount is not None:
            purchase.discount_type = DiscountTypeEnum(discount.type.value)
            purchase.discount_amount = discount.amount

        purchase.payment_amount = apply_discount(
            purchase.original_amount, purchase.discount_type, purchase.discount_amount or 0
        )
        purchase.payment_date = self._clock()

        qrcode_image = self._qr_generator(f"qrcode_{purchase_id}.png", str(purchase_id))
        if qrcode_image:
            purchase.qrcode_image = qrcode_image
        else:
            logger.warning("purchase.qrcode_missing purchase_id=%s", purchase_id)

        purchase.status = PurchaseStatusEnum.EXECUTED
        self._db.add(purchase)
        self._db.commit()
        self._db.refresh(purchase)
        logger.info(
            "purchase.executed purchase_id=%s payment_amount=%.2f",
            purchase_id, purchase.payment_amount,
        )
        return purchase

    # ---------------- READS / MAINTENANCE ----------------
    def seat_map(self, showtime_id: int) -> dict:
        showtime = showtime_crud.get(self._db, showtime_id)
        grid = SeatGrid.from_hall(showtime.hall)
        taken = purchase_crud.taken_seats(self._db, showtime_id, self._clock())
        labels = list(grid.labels())
        return {
            "showtime_id": showtime_id,
            "capacity": grid.capacity,
            "taken_seats": [label for label in labels if label in taken],
            "free_seats": [label for label in labels if label not in taken],
        }

    def release_expired_holds(self, showtime_id: Optional[int] = None) -> int:
        released = purchase_crud.release_expired_holds(self._db, self._clock(), showtime_id)
        self._db.commit()
        return released
