from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from cinema_api.crud.base import CRUDBase
from cinema_api.model.theatre import Showtime
from cinema_api.schemas.theatre_schema import ShowtimeCreate, ShowtimeUpdate

class CRUDShowtime(CRUDBase[Showtime, ShowtimeCreate, ShowtimeUpdate]):
    def find_overlapping(
        self,
        db: Session,
        hall_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_showtime_id: Optional[int] = None,
    ) -> List[Showtime]:
        # Open interval test: a showtime ending exactly at window_start (or
        # starting exactly at window_end) does not overlap.
        query = db.query(Showtime).filter(
            Showtime.hall_id == hall_id,
            Showtime.ended_date_time > window_start,
            Showtime.started_date_time < window_end,
        )
        if exclude_showtime_id is not None:
            query = query.filter(Showtime.showtime_id != exclude_showtime_id)
        return query.order_by(Showtime.started_date_time.asc()).all()

showtime_crud = CRUDShowtime(Showtime, id_field="showtime_id")
