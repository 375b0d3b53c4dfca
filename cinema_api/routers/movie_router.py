from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Annotated, List, Optional
from cinema_api.schemas.movie_schema import MovieCreate, MovieUpdate, MovieOut
from cinema_api.crud.movie_crud import movie_crud
from cinema_api.crud.showtime_crud import showtime_crud
from sqlalchemy.orm import Session
from cinema_api.database import get_db
from cinema_api.utils.auth.jwt_bearer import getcurrent_user
from cinema_api.schemas import UserRole
router = APIRouter(
    prefix="/movies", tags=["movies"]

)

@router.post("/", response_model=MovieOut, status_code=201)
def create_movie(movie: MovieCreate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    return movie_crud.create(db=db, obj_in=movie)

def parse_sort_by(sort_by: Optional[str] = Query(
    None,
    description="Comma-separated sorting fields, e.g. ticket_price:desc,released_date:asc"
)):

    if not sort_by:
        return None

    sort_dict = {}
    try:
        for item in sort_by.split(","):
            key, direction = item.split(":")
            sort_dict[key.strip()] = direction.strip().lower()
        return sort_dict
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="Invalid sort_by format. Use 'field:asc' or 'field:desc' separated by commas."
        )


@router.get("/", response_model=List[MovieOut])
def get_all_movies(
    db: Session = Depends(get_db),
    skip: int = 0,
    limit: int = 10,
    title: Optional[str] = None,
    genre: Optional[str] = None,
    released_date_from: Optional[str] = None,
    sort_by: Annotated[Optional[dict], Depends(parse_sort_by)] = None
):
    filters = {
        "title": title,
        "genre": genre,
        "released_date_from": released_date_from
    }

    # Clean out None values before passing to CRUD
    filters = {k: v for k, v in filters.items() if v is not None}

    return movie_crud.get_all(
        db=db,
        skip=skip,
        limit=limit,
        filters=filters,
        sort_by=sort_by
    )

@router.get("/{movie_id}", response_model=MovieOut)
def get_movie(movie_id: int, db: Session = Depends(get_db)):
    return movie_crud.get(db=db, id=movie_id)

@router.put("/{movie_id}", response_model=MovieOut)
def update_movie(movie_id: int, movie_update: MovieUpdate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    # Purchases keep the amount computed at initiation; a new price only affects new purchases.
    db_movie = movie_crud.get(db=db, id=movie_id)
    return movie_crud.update(db=db, db_obj=db_movie, obj_in=movie_update)

@router.delete("/{movie_id}")
def delete_movie(movie_id: int, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    movie_crud.get(db=db, id=movie_id)
    if showtime_crud.exists(db, movie_id=movie_id):
        raise HTTPException(status_code=400, detail="Movie with showtimes cannot be deleted")
    movie_crud.remove(db=db, id=movie_id)
    return {"detail": f"Movie with ID {movie_id} deleted successfully"}
