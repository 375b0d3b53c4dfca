from datetime import datetime, timedelta
from functools import partial

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from cinema_api.crud.purchase_crud import purchase_crud
from cinema_api.model.purchase import QRCODE_PLACEHOLDER, PurchaseSeat, PurchaseStatusEnum
from cinema_api.schemas import DiscountType
from cinema_api.schemas.purchase_schema import Discount, PaymentDetails
from cinema_api.services.errors import (
    ErrorCode,
    InvalidSeatSelectionError,
    InvalidStateError,
    SeatSelectionExpiredError,
    SeatsUnavailableError,
    TicketLimitError,
)
from cinema_api.services.purchase_service import PurchaseService, apply_discount
from cinema_api.utils.qrcode_generator import generate_qr_code


@pytest.fixture
def showtime(make_hall, make_movie, make_showtime):
    # 2x2 grid: A1 A2 B1 B2, 10.0 per ticket
    return make_showtime(make_movie(ticket_price=10.0), make_hall())


@pytest.fixture
def qr_calls():
    return []


@pytest.fixture
def service(db, config, clock, qr_calls):
    def fake_qr(name, text):
        qr_calls.append((name, text))
        return name
    return PurchaseService(db, config, clock=clock, qr_generator=fake_qr)


def _pay(discount_type=None, amount=0):
    if discount_type is None:
        return PaymentDetails()
    return PaymentDetails(discount=Discount(type=discount_type, amount=amount))


# ---------------- apply_discount ----------------

@pytest.mark.parametrize(
    "discount_type, amount, expected",
    [
        (None, 0, 30.0),
        ("flat", 5, 25.0),
        ("percent", 10, 27.0),
        ("flat", 100, 0.0),
        ("percent", 150, 0.0),
    ],
)
def test_apply_discount(discount_type, amount, expected):
    assert apply_discount(30.0, discount_type, amount) == pytest.approx(expected)


# ---------------- initiate ----------------

def test_initiate_holds_first_free_seats(service, showtime, clock):
    purchase = service.initiate(showtime.showtime_id, 3, user_id="user-1")

    assert purchase.status == PurchaseStatusEnum.INITIATED
    assert purchase.chosen_seats == ["A1", "A2", "B1"]
    assert purchase.original_amount == pytest.approx(30.0)
    assert purchase.user_id == "user-1"
    assert purchase.expired_seat_selection_at == clock.now + timedelta(minutes=10)
    assert sorted(seat.seat_label for seat in purchase.seats) == ["A1", "A2", "B1"]


def test_second_purchase_gets_remaining_seat(service, showtime):
    service.initiate(showtime.showtime_id, 3)

    with pytest.raises(SeatsUnavailableError) as exc_info:
        service.initiate(showtime.showtime_id, 2)
    assert exc_info.value.code is ErrorCode.SEATS_UNAVAILABLE
    assert exc_info.value.remaining == 1

    purchase = service.initiate(showtime.showtime_id, 1)
    assert purchase.chosen_seats == ["B2"]


def test_sold_out_showtime(service, showtime):
    service.initiate(showtime.showtime_id, 4)
    with pytest.raises(SeatsUnavailableError):
        service.initiate(showtime.showtime_id, 1)


@pytest.mark.parametrize("number_tickets", [0, 11])
def test_ticket_limit(service, showtime, number_tickets):
    with pytest.raises(TicketLimitError) as exc_info:
        service.initiate(showtime.showtime_id, number_tickets)
    assert exc_info.value.code is ErrorCode.TICKET_LIMIT_EXCEEDED


def test_initiate_unknown_showtime(service):
    with pytest.raises(HTTPException) as exc_info:
        service.initiate(404, 1)
    assert exc_info.value.status_code == 404


def test_expired_hold_releases_seats(db, service, showtime, clock):
    first = service.initiate(showtime.showtime_id, 4)

    clock.advance(minutes=10)
    # still held at the deadline itself
    with pytest.raises(SeatsUnavailableError):
        service.initiate(showtime.showtime_id, 1)

    clock.advance(seconds=1)
    second = service.initiate(showtime.showtime_id, 2)

    assert second.chosen_seats == ["A1", "A2"]
    db.refresh(first)
    assert first.seats == []
    # history is kept on the lapsed purchase
    assert first.chosen_seats == ["A1", "A2", "B1", "B2"]


def test_paid_purchase_keeps_seats_after_window(service, showtime, clock):
    purchase = service.initiate(showtime.showtime_id, 2)
    service.create(purchase.purchase_id, ["A1", "A2"])
    service.execute(purchase.purchase_id)

    clock.advance(hours=2)
    other = service.initiate(showtime.showtime_id, 2)

    assert other.chosen_seats == ["B1", "B2"]


def test_amount_is_fixed_at_initiation(db, service, showtime):
    purchase = service.initiate(showtime.showtime_id, 2)
    showtime.movie.ticket_price = 99.0
    db.commit()

    service.create(purchase.purchase_id, ["A1", "A2"])
    executed = service.execute(purchase.purchase_id)

    assert executed.original_amount == pytest.approx(20.0)
    assert executed.payment_amount == pytest.approx(20.0)


def test_allocation_retries_after_seat_conflict(service, showtime, monkeypatch):
    service.initiate(showtime.showtime_id, 2)

    real_taken_seats = purchase_crud.taken_seats
    calls = []

    def stale_then_real(db, showtime_id, now):
        calls.append(showtime_id)
        if len(calls) == 1:
            return set()
        return real_taken_seats(db, showtime_id, now)

    monkeypatch.setattr(purchase_crud, "taken_seats", stale_then_real)
    purchase = service.initiate(showtime.showtime_id, 1)

    assert len(calls) == 2
    assert purchase.chosen_seats == ["B1"]


def test_allocation_gives_up_after_repeated_conflicts(service, showtime, monkeypatch):
    service.initiate(showtime.showtime_id, 2)
    monkeypatch.setattr(purchase_crud, "taken_seats", lambda db, showtime_id, now: set())

    with pytest.raises(SeatsUnavailableError):
        service.initiate(showtime.showtime_id, 1)


def test_seat_rows_are_unique_per_showtime(db, service, showtime):
    purchase = service.initiate(showtime.showtime_id, 1)

    db.add(PurchaseSeat(purchase_id=purchase.purchase_id, showtime_id=showtime.showtime_id, seat_label="A1"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


# ---------------- create ----------------

def test_create_confirms_held_seats(service, showtime):
    purchase = service.initiate(showtime.showtime_id, 2)

    created = service.create(purchase.purchase_id, ["A2", "A1"])

    assert created.status == PurchaseStatusEnum.CREATED
    assert created.chosen_seats == ["A2", "A1"]


@pytest.mark.parametrize(
    "chosen_seats",
    [
        ["A1"],              # too few
        ["A1", "A1"],        # repeated
        ["A1", "Z9"],        # not in the hall
        ["A1", "B1"],        # B1 is not held
    ],
)
def test_create_rejects_bad_selection(service, showtime, chosen_seats):
    purchase = service.initiate(showtime.showtime_id, 2)

    with pytest.raises(InvalidSeatSelectionError) as exc_info:
        service.create(purchase.purchase_id, chosen_seats)
    assert exc_info.value.code is ErrorCode.INVALID_SEAT_SELECTION


def test_create_after_window_expired(service, showtime, clock):
    purchase = service.initiate(showtime.showtime_id, 1)
    clock.advance(minutes=10, seconds=1)

    with pytest.raises(SeatSelectionExpiredError) as exc_info:
        service.create(purchase.purchase_id, ["A1"])
    assert exc_info.value.code is ErrorCode.SEAT_SELECTION_EXPIRED


def test_create_at_deadline_is_still_allowed(service, showtime, clock):
    purchase = service.initiate(showtime.showtime_id, 1)
    clock.advance(minutes=10)

    created = service.create(purchase.purchase_id, ["A1"])

    assert created.status == PurchaseStatusEnum.CREATED


def test_create_twice_is_invalid_state(service, showtime):
    purchase = service.initiate(showtime.showtime_id, 1)
    service.create(purchase.purchase_id, ["A1"])

    with pytest.raises(InvalidStateError) as exc_info:
        service.create(purchase.purchase_id, ["A1"])
    assert exc_info.value.code is ErrorCode.INVALID_STATE


def test_create_unknown_purchase(service):
    with pytest.raises(HTTPException) as exc_info:
        service.create(77, ["A1"])
    assert exc_info.value.status_code == 404


# ---------------- execute ----------------

def test_execute_without_discount(service, showtime, clock, qr_calls):
    purchase = service.initiate(showtime.showtime_id, 3)
    service.create(purchase.purchase_id, ["A1", "A2", "B1"])
    clock.advance(minutes=2)

    executed = service.execute(purchase.purchase_id, _pay())

    assert executed.status == PurchaseStatusEnum.EXECUTED
    assert executed.payment_amount == pytest.approx(30.0)
    assert executed.payment_date == clock.now
    assert executed.qrcode_image == f"qrcode_{purchase.purchase_id}.png"
    assert qr_calls == [(f"qrcode_{purchase.purchase_id}.png", str(purchase.purchase_id))]


@pytest.mark.parametrize(
    "discount_type, amount, expected",
    [
        (DiscountType.FLAT, 5, 25.0),
        (DiscountType.PERCENT, 10, 27.0),
        (DiscountType.FLAT, 50, 0.0),
    ],
)
def test_execute_applies_discount(service, showtime, discount_type, amount, expected):
    purchase = service.initiate(showtime.showtime_id, 3)
    service.create(purchase.purchase_id, ["A1", "A2", "B1"])

    executed = service.execute(purchase.purchase_id, _pay(discount_type, amount))

    assert executed.discount_type.value == discount_type.value
    assert executed.discount_amount == pytest.approx(amount)
    assert executed.payment_amount == pytest.approx(expected)


def test_execute_requires_created_status(service, showtime):
    purchase = service.initiate(showtime.showtime_id, 1)

    with pytest.raises(InvalidStateError):
        service.execute(purchase.purchase_id)


def test_execute_twice_is_invalid_state(service, showtime):
    purchase = service.initiate(showtime.showtime_id, 1)
    service.create(purchase.purchase_id, ["A1"])
    service.execute(purchase.purchase_id)

    with pytest.raises(InvalidStateError):
        service.execute(purchase.purchase_id)


def test_execute_keeps_placeholder_when_qr_fails(db, config, clock, showtime, caplog):
    service = PurchaseService(db, config, clock=clock, qr_generator=lambda name, text: None)
    purchase = service.initiate(showtime.showtime_id, 1)
    service.create(purchase.purchase_id, ["A1"])

    with caplog.at_level("WARNING"):
        executed = service.execute(purchase.purchase_id)

    assert executed.status == PurchaseStatusEnum.EXECUTED
    assert executed.qrcode_image == QRCODE_PLACEHOLDER
    assert "purchase.qrcode_missing" in caplog.text


def test_execute_writes_qr_image(db, config, clock, showtime, tmp_path):
    service = PurchaseService(
        db, config, clock=clock, qr_generator=partial(generate_qr_code, directory=str(tmp_path))
    )
    purchase = service.initiate(showtime.showtime_id, 1)
    service.create(purchase.purchase_id, ["A1"])

    executed = service.execute(purchase.purchase_id)

    assert (tmp_path / executed.qrcode_image).is_file()


# ---------------- seat map ----------------

def test_seat_map_reflects_live_holds(service, showtime, clock):
    service.initiate(showtime.showtime_id, 1)
    held = service.initiate(showtime.showtime_id, 1)
    service.create(held.purchase_id, ["A2"])

    seat_map = service.seat_map(showtime.showtime_id)
    assert seat_map["capacity"] == 4
    assert seat_map["taken_seats"] == ["A1", "A2"]
    assert seat_map["free_seats"] == ["B1", "B2"]

    clock.advance(minutes=10, seconds=1)
    assert service.seat_map(showtime.showtime_id)["taken_seats"] == ["A2"]


def test_release_expired_holds(db, service, showtime, clock):
    purchase = service.initiate(showtime.showtime_id, 2)
    assert service.release_expired_holds() == 0

    clock.advance(minutes=11)
    assert service.release_expired_holds() == 2
    db.refresh(purchase)
    assert purchase.seats == []


def test_hold_is_kept_until_deadline_passes(db, service, showtime, clock):
    purchase = service.initiate(showtime.showtime_id, 2)

    clock.advance(minutes=10)
    assert service.release_expired_holds() == 0
    assert purchase_crud.taken_seats(db, showtime.showtime_id, clock.now) == {"A1", "A2"}

    clock.advance(microseconds=1)
    assert purchase_crud.taken_seats(db, showtime.showtime_id, clock.now) == set()
    assert service.release_expired_holds() == 2
