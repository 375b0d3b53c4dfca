from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from cinema_api.crud.base import CRUDBase
from cinema_api.model.movie import Genre
from cinema_api.schemas.movie_schema import GenreCreate, GenreUpdate

class CRUDGenre(CRUDBase[Genre, GenreCreate, GenreUpdate]):
    def get_many(self, db: Session, genre_ids: List[int]) -> List[Genre]:
        """Load genres by id, 404 on the first id that does not exist."""
        wanted = list(dict.fromkeys(genre_ids))
        found = {g.genre_id: g for g in db.query(Genre).filter(Genre.genre_id.in_(wanted)).all()} if wanted else {}
        for genre_id in wanted:
            if genre_id not in found:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Genre with genre_id={genre_id} not found"
                )
        return [found[genre_id] for genre_id in wanted]

genre_crud = CRUDGenre(Genre, id_field="genre_id")
