"""Pytest configuration and shared fixtures."""

import os
import tempfile

# Must be set before cinema_api reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FILE_GENERATED_PATH", tempfile.mkdtemp(prefix="cinema-qr-"))
os.environ.setdefault("EXPIRED_HOLDS_CLEANUP_SECONDS", "0")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import cinema_api.model  # noqa: F401  registers tables
from cinema_api.crud.setting_crud import setting_crud
from cinema_api.database import Base, get_db
from cinema_api.main import app
from cinema_api.model import Hall, Movie, Showtime
from cinema_api.services.config import SchedulingConfig
from cinema_api.utils.auth.jwt_handler import create_access_token


class FakeClock:
    """Settable replacement for utcnow()."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def clear_setting_cache():
    setting_crud.invalidate()
    yield
    setting_crud.invalidate()


@pytest.fixture
def config() -> SchedulingConfig:
    return SchedulingConfig(
        min_interval_minutes=30,
        seat_selection_window_minutes=10,
        max_tickets_per_purchase=10,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2023, 10, 20, 12, 0))


@pytest.fixture
def make_hall(db):
    def factory(name="Main Hall", seat_rows=("A", "B"), seat_columns=("1", "2")) -> Hall:
        hall = Hall(name=name, seat_rows=list(seat_rows), seat_columns=list(seat_columns))
        db.add(hall)
        db.commit()
        db.refresh(hall)
        return hall
    return factory


@pytest.fixture
def make_movie(db):
    def factory(title="Interstellar", ticket_price=10.0, duration_in_minutes=120) -> Movie:
        movie = Movie(
            title=title,
            description="Space and time",
            ticket_price=ticket_price,
            duration_in_minutes=duration_in_minutes,
            released_date=datetime(2014, 11, 7),
        )
        db.add(movie)
        db.commit()
        db.refresh(movie)
        return movie
    return factory


@pytest.fixture
def make_showtime(db):
    def factory(movie: Movie, hall: Hall, start=datetime(2023, 10, 20, 17, 0)) -> Showtime:
        showtime = Showtime(
            started_date_time=start,
            ended_date_time=start + timedelta(minutes=movie.duration_in_minutes),
            movie_id=movie.movie_id,
            hall_id=hall.hall_id,
        )
        db.add(showtime)
        db.commit()
        db.refresh(showtime)
        return showtime
    return factory


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    token = create_access_token({"sub": "admin-1", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers() -> dict:
    token = create_access_token({"sub": "user-1", "role": "user"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_user_headers() -> dict:
    token = create_access_token({"sub": "user-2", "role": "user"})
    return {"Authorization": f"Bearer {token}"}
