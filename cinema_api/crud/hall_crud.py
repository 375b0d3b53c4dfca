from cinema_api.crud.base import CRUDBase
from cinema_api.model.theatre import Hall
from cinema_api.schemas.theatre_schema import HallCreate, HallUpdate

class CRUDHall(CRUDBase[Hall, HallCreate, HallUpdate]):
    def get_all(self, db, skip: int = 0, limit: int = 10, filters: dict = None):
        query = db.query(Hall)

        if filters:
            for attr, value in filters.items():
                if value is None:
                    continue  # skip empty filters

                # partial match on name
                if attr == "name":
                    query = query.filter(Hall.name.ilike(f"%{value}%"))

                elif hasattr(Hall, attr):
                    query = query.filter(getattr(Hall, attr) == value)

                else:
                    raise ValueError(f"Invalid filter field: {attr}")

        return query.order_by(Hall.hall_id.asc()).offset(skip).limit(limit).all()

hall_crud = CRUDHall(Hall, id_field="hall_id")
