from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from . import ORMModel


# GENRE
class GenreBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str


class GenreCreate(GenreBase):
    pass


class GenreUpdate(ORMModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None


class GenreOut(GenreBase):
    genre_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


# MOVIE
class MovieBase(ORMModel):
    title: str = Field(..., max_length=100)
    description: str
    ticket_price: float = Field(..., ge=0)
    duration_in_minutes: int = Field(..., ge=0)
    released_date: datetime
    trailer_url: Optional[str] = Field(None, max_length=255)
    poster_url: Optional[str] = Field(None, max_length=255)


class MovieCreate(MovieBase):
    genre_ids: List[int] = Field(default_factory=list)


class MovieUpdate(ORMModel):
    title: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    ticket_price: Optional[float] = Field(None, ge=0)
    duration_in_minutes: Optional[int] = Field(None, ge=0)
    released_date: Optional[datetime] = None
    trailer_url: Optional[str] = Field(None, max_length=255)
    poster_url: Optional[str] = Field(None, max_length=255)
    genre_ids: Optional[List[int]] = None


class MovieOut(MovieBase):
    movie_id: int
    genres: List[GenreOut] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
