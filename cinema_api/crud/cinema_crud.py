from cinema_api.crud.base import CRUDBase
from cinema_api.model.theatre import Cinema
from cinema_api.schemas.theatre_schema import CinemaCreate, CinemaUpdate

class CRUDCinema(CRUDBase[Cinema, CinemaCreate, CinemaUpdate]):
    def get_all(self, db, skip: int = 0, limit: int = 10, filters: dict = None):
        query = db.query(Cinema)

        for attr, value in (filters or {}).items():
            if value is None:
                continue
            # name and address are searched by substring
            if attr in ("name", "address"):
                query = query.filter(getattr(Cinema, attr).ilike(f"%{value}%"))
            else:
                raise ValueError(f"Invalid filter field: {attr}")

        return query.order_by(Cinema.cinema_id.asc()).offset(skip).limit(limit).all()

cinema_crud = CRUDCinema(Cinema, id_field="cinema_id")
