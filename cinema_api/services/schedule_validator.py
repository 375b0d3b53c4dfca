"""Overlap check for showtimes sharing a hall."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from cinema_api.crud.showtime_crud import showtime_crud
from cinema_api.services.config import SchedulingConfig
from cinema_api.services.errors import SchedulingConflictError

logger = logging.getLogger(__name__)


class ScheduleValidator:
    """Decides whether a hall is free for a candidate showtime.

    Every showtime is padded by `min_interval_minutes` on both sides so that
    consecutive showtimes leave a turnover gap. Touching the padded boundary
    exactly is allowed.
    """

    def __init__(self, db: Session, config: SchedulingConfig) -> None:
        self._db = db
        self._buffer = timedelta(minutes=config.min_interval_minutes)

    def is_available(
        self,
        hall_id: int,
        start: datetime,
        end: datetime,
        exclude_showtime_id: Optional[int] = None,
    ) -> bool:
        conflicts = showtime_crud.find_overlapping(
            self._db,
            hall_id=hall_id,
            window_start=start - self._buffer,
            window_end=end + self._buffer,
            exclude_showtime_id=exclude_showtime_id,
        )
        if conflicts:
            logger.info(
                "schedule.conflict hall_id=%s start=%s end=%s conflicting=%s",
                hall_id, start.isoformat(), end.isoformat(),
                [s.showtime_id for s in conflicts],
            )
        return not conflicts

    def ensure_available(
        self,
        hall_id: int,
        start: datetime,
        end: datetime,
        exclude_showtime_id: Optional[int] = None,
    ) -> None:
        """Raises:
            SchedulingConflictError: If the padded window overlaps another showtime.
        """
        if not self.is_available(hall_id, start, end, exclude_showtime_id):
            raise SchedulingConflictError(hall_id)
