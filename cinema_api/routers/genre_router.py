from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from cinema_api.database import get_db
from cinema_api.schemas.movie_schema import GenreCreate, GenreUpdate, GenreOut, MovieOut
from cinema_api.crud.genre_crud import genre_crud
from cinema_api.crud.movie_crud import movie_crud
from cinema_api.schemas import UserRole
from cinema_api.utils.auth.jwt_bearer import getcurrent_user
router = APIRouter(prefix="/genres", tags=["Genres"])

@router.post("/", response_model=GenreOut, status_code=201)
def create_genre(genre: GenreCreate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    if genre_crud.exists(db, name=genre.name):
        raise HTTPException(status_code=400, detail="Duplicated field value provided")
    return genre_crud.create(db=db, obj_in=genre)

@router.get("/", response_model=List[GenreOut])
def get_all_genres(db: Session = Depends(get_db), skip: int = 0, limit: int = 50):
    return genre_crud.get_all(db=db, skip=skip, limit=limit)

@router.get("/{genre_id}", response_model=GenreOut)
def get_genre(genre_id: int, db: Session = Depends(get_db)):
    return genre_crud.get(db=db, id=genre_id)

@router.get("/{genre_id}/movies", response_model=List[MovieOut])
def get_genre_movies(genre_id: int, db: Session = Depends(get_db), skip: int = 0, limit: int = 10):
    """Movies tagged with a genre"""
    genre_crud.get(db=db, id=genre_id)
    return movie_crud.get_all(db=db, skip=skip, limit=limit, filters={"genre_id": genre_id})

@router.put("/{genre_id}", response_model=GenreOut)
def update_genre(genre_id: int, genre: GenreUpdate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    db_genre = genre_crud.get(db=db, id=genre_id)
    return genre_crud.update(db=db, db_obj=db_genre, obj_in=genre)

@router.delete("/{genre_id}")
def delete_genre(genre_id: int, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    genre_crud.remove(db=db, id=genre_id)
    return {"detail": f"Genre with ID {genre_id} deleted successfully"}
