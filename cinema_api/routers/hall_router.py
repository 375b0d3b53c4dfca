from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from cinema_api.database import get_db
from cinema_api.schemas.theatre_schema import HallCreate, HallUpdate, HallOut
from cinema_api.crud.hall_crud import hall_crud
from cinema_api.crud.showtime_crud import showtime_crud
from cinema_api.schemas import UserRole
from cinema_api.utils.auth.jwt_bearer import getcurrent_user
router = APIRouter(prefix="/halls", tags=["Halls"])

@router.post("/", response_model=HallOut, status_code=201)
def create_hall(hall: HallCreate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    """Create a new hall"""
    return hall_crud.create(db=db, obj_in=hall)

@router.get("/", response_model=List[HallOut])
def get_all_halls(db: Session = Depends(get_db), skip: int = 0, limit: int = 10, name: str = None):
    """Fetch all halls"""
    filters = {"name": name}
    return hall_crud.get_all(db=db, skip=skip, limit=limit, filters=filters)


@router.get("/{hall_id}", response_model=HallOut)
def get_hall(hall_id: int, db: Session = Depends(get_db)):
    """Fetch a hall by ID"""
    return hall_crud.get(db=db, id=hall_id)

@router.put("/{hall_id}", response_model=HallOut)
def update_hall(hall_id: int, hall: HallUpdate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    """Update hall details"""
    db_hall = hall_crud.get(db=db, id=hall_id)
    return hall_crud.update(db=db, db_obj=db_hall, obj_in=hall)

@router.delete("/{hall_id}")
def delete_hall(hall_id: int, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    """Delete a hall that has no showtimes"""
    hall_crud.get(db=db, id=hall_id)
    if showtime_crud.exists(db, hall_id=hall_id):
        raise HTTPException(status_code=400, detail="Hall with showtimes cannot be deleted")
    hall_crud.remove(db=db, id=hall_id)
    return {"message": "Hall deleted successfully"}
