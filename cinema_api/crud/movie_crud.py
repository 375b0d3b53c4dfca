from sqlalchemy.orm import Session

from cinema_api.crud.base import CRUDBase
from cinema_api.crud.genre_crud import genre_crud
from cinema_api.model.movie import Genre, Movie
from cinema_api.schemas.movie_schema import MovieCreate, MovieUpdate

class CRUDMovie(CRUDBase[Movie, MovieCreate, MovieUpdate]):
    def get_all(self, db: Session, skip=0, limit=10, filters=None, sort_by=None):
        query = db.query(Movie)
        if filters:
            for attr, value in filters.items():
                if attr == "title" and value:
                    query = query.filter(Movie.title.ilike(f"%{value}%"))
                if attr == "genre" and value:
                    query = query.filter(Movie.genres.any(Genre.name.ilike(value)))
                if attr == "genre_id" and value:
                    query = query.filter(Movie.genres.any(Genre.genre_id == value))
                if attr == "released_date_from" and value:
                    query = query.filter(Movie.released_date >= value)
        if sort_by:
             for attr, direction in sort_by.items():
                if hasattr(Movie, attr):
                    column = getattr(Movie, attr)
                    if direction.lower() == "desc":
                        query = query.order_by(column.desc())
                    else:
                        query = query.order_by(column.asc())
        else:
            query = query.order_by(Movie.movie_id.asc())
        return query.offset(skip).limit(limit).all()

    def create(self, db: Session, obj_in: MovieCreate):
        data = obj_in.model_dump(exclude={"genre_ids"})
        obj = Movie(**data, genres=genre_crud.get_many(db, obj_in.genre_ids))
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def update(self, db: Session, db_obj: Movie, obj_in: MovieUpdate):
        changes = obj_in.model_dump(exclude_unset=True)
        genre_ids = changes.pop("genre_ids", None)
        if genre_ids is not None:
            db_obj.genres = genre_crud.get_many(db, genre_ids)
        return super().update(db, db_obj, changes)

movie_crud = CRUDMovie(Movie, id_field="movie_id")
