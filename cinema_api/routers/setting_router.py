from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from cinema_api.database import get_db
from cinema_api.crud.setting_crud import parse_value, setting_crud
from cinema_api.model.setting import Setting
from cinema_api.schemas import UserRole
from cinema_api.schemas.setting_schema import SettingCreate, SettingOut, SettingUpdate, check_value
from cinema_api.utils.auth.jwt_bearer import getcurrent_user

router = APIRouter(prefix="/settings", tags=["Settings"])


def _to_out(setting: Setting) -> SettingOut:
    return SettingOut(
        setting_id=setting.setting_id,
        key=setting.key,
        value=parse_value(setting.value, setting.type),
        type=setting.type.value,
        created_at=setting.created_at,
        updated_at=setting.updated_at,
    )


@router.post("/", response_model=SettingOut, status_code=status.HTTP_201_CREATED)
def create_setting(obj: SettingCreate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    if setting_crud.exists(db, key=obj.key):
        raise HTTPException(status_code=400, detail="Duplicated field value provided")
    return _to_out(setting_crud.create(db, obj))


@router.get("/", response_model=List[SettingOut])
def get_settings(db: Session = Depends(get_db), skip: int = 0, limit: int = 50, current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    return [_to_out(s) for s in setting_crud.get_all(db, skip=skip, limit=limit)]


@router.get("/{key}", response_model=SettingOut)
def get_setting(key: str, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    return _to_out(setting_crud.get(db, key.lower()))


@router.put("/{key}", response_model=SettingOut)
def update_setting(key: str, obj: SettingUpdate, db: Session = Depends(get_db), current_user: dict = Depends(getcurrent_user(UserRole.ADMIN.value))):
    db_obj = setting_crud.get(db, key.lower())
    changes = obj.model_dump(exclude_none=True)
    value = changes.get("value", db_obj.value)
    type_ = changes.get("type", db_obj.type)
    try:
        check_value(value, type_)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"value is not a valid {type_.value}")
    return _to_out(setting_crud.update(db, db_obj, changes))
