from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Table access shared by every entity.

    `id_field` names the column used by get/remove; it is not always the
    primary key (settings are addressed by their key).
    """

    def __init__(self, model: Type[ModelType], id_field: str = "id"):
        self.model = model
        self.id_field = id_field

    @property
    def id_column(self):
        return getattr(self.model, self.id_field)

    # ---------------- GET ----------------
    def get(self, db: Session, id: Any, for_update: bool = False) -> ModelType:
        """Raises HTTPException(404) when no row matches.

        `for_update` takes a row lock until the session commits (no-op on SQLite).
        """
        query = db.query(self.model).filter(self.id_column == id)
        if for_update:
            query = query.with_for_update()
        obj = query.first()
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.model.__name__} with {self.id_field}={id} not found"
            )
        return obj

    # ---------------- GET ALL ----------------
    def get_all(self, db: Session, skip=0, limit=10, filters: Optional[Dict[str, Any]] = None) -> List[ModelType]:
        query = db.query(self.model)
        for key, value in (filters or {}).items():
            if value is not None:
                query = query.filter(getattr(self.model, key) == value)
        return query.order_by(self.id_column.asc()).offset(skip).limit(limit).all()

    def exists(self, db: Session, **filters) -> bool:
        query = db.query(self.id_column)
        for key, value in filters.items():
            query = query.filter(getattr(self.model, key) == value)
        return query.first() is not None

    # ---------------- CREATE ----------------
    def create(self, db: Session, obj_in: CreateSchemaType) -> ModelType:
        obj = self.model(**obj_in.model_dump())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    # ---------------- UPDATE ----------------
    def update(self, db: Session, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]) -> ModelType:
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # ---------------- DELETE ----------------
    def remove(self, db: Session, id: Any):
        obj = self.get(db, id)
        db.delete(obj)
        db.commit()
        return {"detail": f"{self.model.__name__} deleted successfully"}
