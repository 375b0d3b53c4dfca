from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from cinema_api.database import Base
from cinema_api.utils.helper import utcnow

movie_genres = Table(
    "movie_genres",
    Base.metadata,
    Column("movie_id", Integer, ForeignKey("movies.movie_id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.genre_id", ondelete="CASCADE"), primary_key=True),
)


class Genre(Base):
    __tablename__="genres"
    genre_id=Column(Integer, primary_key=True, index=True)
    name=Column(String(50), nullable=False, unique=True)
    description=Column(String(1000), nullable=False)
    created_at=Column(DateTime, default=utcnow, nullable=False)
    updated_at=Column(DateTime, onupdate=utcnow, nullable=True)

    movies = relationship("Movie", secondary=movie_genres, back_populates="genres")


class Movie(Base):
    __tablename__="movies"
    movie_id=Column(Integer, primary_key=True, index=True)
    title=Column(String(100), nullable=False, unique=True)
    description=Column(String(1000), nullable=False)
    ticket_price=Column(Float, nullable=False)
    duration_in_minutes=Column(Integer, nullable=False)
    released_date=Column(DateTime, nullable=False)
    trailer_url=Column(String(255), nullable=True)
    poster_url=Column(String(255), nullable=True)
    created_at=Column(DateTime, default=utcnow, nullable=False)
    updated_at=Column(DateTime, onupdate=utcnow, nullable=True)

    genres = relationship("Genre", secondary=movie_genres, back_populates="movies", order_by="Genre.name")
    showtimes = relationship("Showtime", back_populates="movie", cascade="all,delete-orphan")
