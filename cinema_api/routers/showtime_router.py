from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from cinema_api.database import get_db
from cinema_api.schemas.theatre_schema import ShowtimeCreate, ShowtimeUpdate, ShowtimeOut, SeatMapOut
from cinema_api.crud.showtime_crud import showtime_crud
from cinema_api.services.dependencies import get_purchase_service, get_showtime_service
from cinema_api.services.purchase_service import PurchaseService
from cinema_api.services.showtime_service import ShowtimeService
from cinema_api.utils.auth.jwt_bearer import getcurrent_user
from cinema_api.schemas import UserRole
router = APIRouter(prefix="/showtimes", tags=["Showtimes"])


@router.post("/", response_model=ShowtimeOut, status_code=status.HTTP_201_CREATED)
def create_showtime(
    showtime_in: ShowtimeCreate,
    service: ShowtimeService = Depends(get_showtime_service),
    current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value)),
):
    return service.create(
        started_date_time=showtime_in.started_date_time,
        movie_id=showtime_in.movie_id,
        hall_id=showtime_in.hall_id,
    )

# -----------------------------
# GET ALL SHOWTIMES (with filters)
# -----------------------------
@router.get("/", response_model=List[ShowtimeOut])
def get_all_showtimes(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 10,
    movie_id: Optional[int] = None,
    hall_id: Optional[int] = None,
):
    filters = {}
    if movie_id:
        filters["movie_id"] = movie_id
    if hall_id:
        filters["hall_id"] = hall_id

    return showtime_crud.get_all(db=db, skip=skip, limit=limit, filters=filters)

# -----------------------------
# GET SHOWTIME BY ID
# -----------------------------
@router.get("/{showtime_id}", response_model=ShowtimeOut)
def get_showtime(showtime_id: int, db: Session = Depends(get_db)):
    return showtime_crud.get(db=db, id=showtime_id)

# -----------------------------
# SEAT MAP
# -----------------------------
@router.get("/{showtime_id}/seats", response_model=SeatMapOut)
def get_seat_map(showtime_id: int, service: PurchaseService = Depends(get_purchase_service)):
    return service.seat_map(showtime_id)

# -----------------------------
# UPDATE SHOWTIME
# -----------------------------
@router.put("/{showtime_id}", response_model=ShowtimeOut)
def update_showtime(
    showtime_id: int,
    showtime_in: ShowtimeUpdate,
    service: ShowtimeService = Depends(get_showtime_service),
    current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value)),
):
    return service.update(showtime_id, showtime_in)

# -----------------------------
# DELETE SHOWTIME
# -----------------------------
@router.delete("/{showtime_id}")
def delete_showtime(
    showtime_id: int,
    service: ShowtimeService = Depends(get_showtime_service),
    current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value)),
):
    service.delete(showtime_id)
    return {"detail": f"Showtime with ID {showtime_id} deleted successfully"}
