"""Seat allocation and keyed locking under real threads."""

import threading
import time
from collections import Counter
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from cinema_api.database import Base
from cinema_api.model import Hall, Movie, PurchaseSeat, Showtime
from cinema_api.services.errors import SeatsUnavailableError
from cinema_api.services.purchase_service import PurchaseService
from cinema_api.utils.locks import KeyedLock


@pytest.fixture
def file_sessions(tmp_path):
    # A file database so every thread gets its own connection
    engine = create_engine(
        f"sqlite:///{tmp_path / 'cinema.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def grid_showtime(file_sessions):
    """Showtime in a 3x3 hall, returned as (showtime_id, capacity)."""
    db = file_sessions()
    try:
        hall = Hall(name="Grid Hall", seat_rows=["A", "B", "C"], seat_columns=["1", "2", "3"])
        movie = Movie(
            title="Rush Hour",
            description="Crowded",
            ticket_price=8.0,
            duration_in_minutes=90,
            released_date=datetime(1998, 9, 18),
        )
        db.add_all([hall, movie])
        db.flush()
        start = datetime(2023, 10, 20, 17, 0)
        showtime = Showtime(
            started_date_time=start,
            ended_date_time=start + timedelta(minutes=90),
            movie_id=movie.movie_id,
            hall_id=hall.hall_id,
        )
        db.add(showtime)
        db.commit()
        return showtime.showtime_id, 9
    finally:
        db.close()


@pytest.mark.parametrize("workers, tickets", [(8, 2), (6, 3), (12, 1)])
def test_parallel_initiate_never_double_books(file_sessions, grid_showtime, config, workers, tickets):
    showtime_id, capacity = grid_showtime
    barrier = threading.Barrier(workers)
    allocated, refused, errors = [], [], []
    results_lock = threading.Lock()

    def buy():
        db = file_sessions()
        try:
            barrier.wait()
            purchase = PurchaseService(db, config).initiate(showtime_id, tickets)
            with results_lock:
                allocated.append(list(purchase.chosen_seats))
        except SeatsUnavailableError:
            with results_lock:
                refused.append(1)
        except Exception as e:  # surfaced by the assertion below
            with results_lock:
                errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=buy) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    expected_successes = min(workers, capacity // tickets)
    assert len(allocated) == expected_successes
    assert len(refused) == workers - expected_successes

    labels = Counter(label for seats in allocated for label in seats)
    assert all(count == 1 for count in labels.values())
    assert sum(labels.values()) == expected_successes * tickets

    db = file_sessions()
    try:
        stored = [row.seat_label for row in db.query(PurchaseSeat).filter_by(showtime_id=showtime_id)]
    finally:
        db.close()
    assert sorted(stored) == sorted(labels)


def test_parallel_initiate_fills_hall_exactly(file_sessions, grid_showtime, config):
    showtime_id, capacity = grid_showtime
    barrier = threading.Barrier(5)
    allocated = []
    results_lock = threading.Lock()

    def buy():
        db = file_sessions()
        try:
            barrier.wait()
            purchase = PurchaseService(db, config).initiate(showtime_id, 3)
            with results_lock:
                allocated.extend(purchase.chosen_seats)
        except SeatsUnavailableError:
            pass
        finally:
            db.close()

    threads = [threading.Thread(target=buy) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(allocated) == ["A1", "A2", "A3", "B1", "B2", "B3", "C1", "C2", "C3"]
    assert len(allocated) == capacity


# ---------------- KeyedLock ----------------

def test_keyed_lock_serializes_same_key():
    locks = KeyedLock()
    inside = []
    overlaps = []
    barrier = threading.Barrier(4)

    def work():
        barrier.wait()
        with locks.hold("showtime-1"):
            inside.append(1)
            if len(inside) > 1:
                overlaps.append(1)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []


def test_keyed_lock_does_not_block_other_keys():
    locks = KeyedLock()
    entered = threading.Event()

    def other_key():
        with locks.hold("hall-2"):
            entered.set()

    with locks.hold("hall-1"):
        t = threading.Thread(target=other_key)
        t.start()
        assert entered.wait(timeout=5)
        t.join()


def test_keyed_lock_forgets_released_keys():
    locks = KeyedLock()

    for key in range(100):
        with locks.hold(key):
            assert len(locks) == 1

    assert len(locks) == 0


def test_keyed_lock_kept_while_someone_waits():
    locks = KeyedLock()
    waiter_done = threading.Event()

    def waiter():
        with locks.hold("k"):
            waiter_done.set()

    with locks.hold("k"):
        t = threading.Thread(target=waiter)
        t.start()
        # waiter is queued on the same mutex
        deadline = time.time() + 5
        while locks._users.get("k", 0) < 2 and time.time() < deadline:
            time.sleep(0.001)
        assert locks._users["k"] == 2

    assert waiter_done.wait(timeout=5)
    t.join()
    assert len(locks) == 0


def test_keyed_lock_released_on_error():
    locks = KeyedLock()

    with pytest.raises(RuntimeError):
        with locks.hold("k"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    with locks.hold("k"):
        pass
