from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from cinema_api.database import get_db
from cinema_api.schemas.theatre_schema import CinemaCreate, CinemaUpdate, CinemaOut
from cinema_api.crud.cinema_crud import cinema_crud
from cinema_api.schemas import UserRole
from cinema_api.utils.auth.jwt_bearer import getcurrent_user
router = APIRouter(prefix="/cinemas", tags=["Cinemas"])

@router.post("/", response_model=CinemaOut, status_code=201)
def create_cinema(cinema: CinemaCreate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    if cinema_crud.exists(db, name=cinema.name):
        raise HTTPException(status_code=400, detail="Duplicated field value provided")
    return cinema_crud.create(db=db, obj_in=cinema)

@router.get("/", response_model=List[CinemaOut])
def get_all_cinemas(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 10,
    name: Optional[str] = None,
    address: Optional[str] = None,
):
    return cinema_crud.get_all(db=db, skip=skip, limit=limit, filters={"name": name, "address": address})

@router.get("/{cinema_id}", response_model=CinemaOut)
def get_cinema(cinema_id: int, db: Session = Depends(get_db)):
    return cinema_crud.get(db=db, id=cinema_id)

@router.put("/{cinema_id}", response_model=CinemaOut)
def update_cinema(cinema_id: int, cinema: CinemaUpdate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    db_cinema = cinema_crud.get(db=db, id=cinema_id)
    return cinema_crud.update(db=db, db_obj=db_cinema, obj_in=cinema)

@router.delete("/{cinema_id}")
def delete_cinema(cinema_id: int, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    cinema_crud.remove(db=db, id=cinema_id)
    return {"detail": f"Cinema with ID {cinema_id} deleted successfully"}
