from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from . import ORMModel
from cinema_api.utils.helper import to_naive_utc, utcnow


def _stringify_labels(v):
    # Row/column labels may be posted as numbers
    if isinstance(v, list):
        return [str(item) for item in v]
    return v


def _check_labels(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    if any(not label.strip() for label in v):
        raise ValueError("Seat labels must not be empty")
    if len(set(v)) != len(v):
        raise ValueError("Seat labels must be unique")
    return v


def _check_start(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return v
    v = to_naive_utc(v)
    if v < utcnow():
        raise ValueError("started_date_time must not be in the past")
    return v


# CINEMA
class CinemaBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=255)
    photo: str = "no-photo.png"


class CinemaCreate(CinemaBase):
    pass


class CinemaUpdate(ORMModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    photo: Optional[str] = None


class CinemaOut(CinemaBase):
    cinema_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


# HALL
class HallBase(ORMModel):
    name: str = Field(..., min_length=5, max_length=100)
    seat_rows: List[str] = Field(..., min_length=1, description="Ordered row labels, e.g. ['A', 'B']")
    seat_columns: List[str] = Field(..., min_length=1, description="Ordered column labels, e.g. ['1', '2']")
    location_image: str = "no-photo.jpg"

    @field_validator("seat_rows", "seat_columns", mode="before")
    @classmethod
    def _labels_as_strings(cls, v):
        return _stringify_labels(v)

    @field_validator("seat_rows", "seat_columns")
    @classmethod
    def _labels_valid(cls, v):
        return _check_labels(v)


class HallCreate(HallBase):
    pass


class HallUpdate(ORMModel):
    name: Optional[str] = Field(None, min_length=5, max_length=100)
    seat_rows: Optional[List[str]] = Field(None, min_length=1)
    seat_columns: Optional[List[str]] = Field(None, min_length=1)
    location_image: Optional[str] = None

    @field_validator("seat_rows", "seat_columns", mode="before")
    @classmethod
    def _labels_as_strings(cls, v):
        return _stringify_labels(v)

    @field_validator("seat_rows", "seat_columns")
    @classmethod
    def _labels_valid(cls, v):
        return _check_labels(v)


class HallOut(HallBase):
    hall_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


# SHOWTIME
class ShowtimeCreate(ORMModel):
    started_date_time: datetime = Field(..., description="ISO datetime; naive values are read as UTC")
    movie_id: int
    hall_id: int

    @field_validator("started_date_time")
    @classmethod
    def _not_in_past(cls, v):
        return _check_start(v)


class ShowtimeUpdate(ORMModel):
    started_date_time: Optional[datetime] = None
    movie_id: Optional[int] = None
    hall_id: Optional[int] = None

    @field_validator("started_date_time")
    @classmethod
    def _not_in_past(cls, v):
        return _check_start(v)


class ShowtimeOut(ORMModel):
    showtime_id: int
    started_date_time: datetime
    ended_date_time: datetime
    movie_id: int
    hall_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class SeatMapOut(ORMModel):
    showtime_id: int
    capacity: int
    taken_seats: List[str]
    free_seats: List[str]
