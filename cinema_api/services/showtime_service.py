"""Showtime creation and rescheduling.

End times are always derived from the movie duration here, never taken from
the caller.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from cinema_api.crud.hall_crud import hall_crud
from cinema_api.crud.movie_crud import movie_crud
from cinema_api.crud.purchase_crud import purchase_crud
from cinema_api.crud.showtime_crud import showtime_crud
from cinema_api.model.theatre import Showtime
from cinema_api.schemas.theatre_schema import ShowtimeUpdate
from cinema_api.services.config import SchedulingConfig
from cinema_api.services.errors import InvalidStateError
from cinema_api.services.schedule_validator import ScheduleValidator
from cinema_api.utils.helper import to_naive_utc
from cinema_api.utils.locks import hall_locks

logger = logging.getLogger(__name__)


def compute_end(start: datetime, duration_in_minutes: int) -> datetime:
    return start + timedelta(minutes=duration_in_minutes)


class ShowtimeService:
    def __init__(self, db: Session, config: SchedulingConfig, validator: Optional[ScheduleValidator] = None) -> None:
        self._db = db
        self._validator = validator or ScheduleValidator(db, config)

    def create(self, started_date_time: datetime, movie_id: int, hall_id: int) -> Showtime:
        """Schedule a movie in a hall.

        Raises:
            HTTPException(404): If the movie or hall does not exist.
            SchedulingConflictError: If the hall is busy around that time.
        """
        movie = movie_crud.get(self._db, movie_id)
        hall_crud.get(self._db, hall_id)

        start = to_naive_utc(started_date_time)
        end = compute_end(start, movie.duration_in_minutes)

        with hall_locks.hold(hall_id):
            self._validator.ensure_available(hall_id, start, end)
            showtime = Showtime(
                started_date_time=start,
                ended_date_time=end,
                movie_id=movie_id,
                hall_id=hall_id,
            )
            self._db.add(showtime)
            self._db.commit()

        self._db.refresh(showtime)
        logger.info(
            "showtime.created showtime_id=%s hall_id=%s start=%s end=%s",
            showtime.showtime_id, hall_id, start.isoformat(), end.isoformat(),
        )
        return showtime

    def update(self, showtime_id: int, patch: Union[ShowtimeUpdate, Dict[str, Any]]) -> Showtime:
        """Move a showtime and/or swap its movie or hall, re-deriving the end time.

        Raises:
            HTTPException(404): If the showtime, or a newly referenced movie/hall, does not exist.
            SchedulingConflictError: If the new slot clashes with another showtime.
        """
        if isinstance(patch, ShowtimeUpdate):
            patch = patch.model_dump(exclude_unset=True)
        patch = {k: v for k, v in patch.items() if v is not None}

        showtime = showtime_crud.get(self._db, showtime_id)
        start = to_naive_utc(patch.get("started_date_time", showtime.started_date_time))
        movie_id = patch.get("movie_id", showtime.movie_id)
        hall_id = patch.get("hall_id", showtime.hall_id)

        movie = movie_crud.get(self._db, movie_id)
        if hall_id != showtime.hall_id:
            hall_crud.get(self._db, hall_id)
        end = compute_end(start, movie.duration_in_minutes)

        with hall_locks.hold(hall_id):
            self._validator.ensure_available(hall_id, start, end, exclude_showtime_id=showtime_id)
            showtime.started_date_time = start
            showtime.ended_date_time = end
            showtime.movie_id = movie_id
            showtime.hall_id = hall_id
            self._db.add(showtime)
            self._db.commit()

        self._db.refresh(showtime)
        logger.info(
            "showtime.updated showtime_id=%s hall_id=%s start=%s end=%s",
            showtime_id, hall_id, start.isoformat(), end.isoformat(),
        )
        return showtime

    def delete(self, showtime_id: int) -> None:
        """Raises:
            HTTPException(404): If the showtime does not exist.
            InvalidStateError: If tickets were already sold or held for it.
        """
        showtime = showtime_crud.get(self._db, showtime_id)
        if purchase_crud.exists(self._db, showtime_id=showtime_id):
            raise InvalidStateError("Showtime with purchases cannot be deleted")
        self._db.delete(showtime)
        self._db.commit()
        logger.info("showtime.deleted showtime_id=%s", showtime_id)
