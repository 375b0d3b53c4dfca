from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
)
from sqlalchemy.orm import relationship

from cinema_api.database import Base
from cinema_api.utils.helper import utcnow


#cinema
class Cinema(Base):
    __tablename__ = "cinemas"

    cinema_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    address = Column(String(255), nullable=False)
    photo = Column(String(255), nullable=False, default="no-photo.png")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)


#hall
class Hall(Base):
    __tablename__ = "halls"

    hall_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    seat_rows = Column(JSON, nullable=False)     # ordered row labels, e.g. ["A", "B"]
    seat_columns = Column(JSON, nullable=False)  # ordered column labels, e.g. ["1", "2"]
    location_image = Column(String(255), nullable=False, default="no-photo.jpg")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    showtimes = relationship("Showtime", back_populates="hall", cascade="all,delete-orphan")


#showtime
class Showtime(Base):
    __tablename__ = "showtimes"

    showtime_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    started_date_time = Column(DateTime, nullable=False)
    ended_date_time = Column(DateTime, nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.movie_id", ondelete="CASCADE"), nullable=False)
    hall_id = Column(Integer, ForeignKey("halls.hall_id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    # Relations
    movie = relationship("Movie", back_populates="showtimes")
    hall = relationship("Hall", back_populates="showtimes")
    purchases = relationship("Purchase", back_populates="showtime")

    __table_args__ = (
        Index("ix_showtimes_hall_window", "hall_id", "started_date_time", "ended_date_time"),
        Index("ix_showtimes_movie_id", "movie_id"),
    )
