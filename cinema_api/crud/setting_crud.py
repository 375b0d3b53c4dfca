import json
import logging
from threading import Lock
from typing import Any, Dict, Union

from sqlalchemy.orm import Session

from cinema_api.crud.base import CRUDBase
from cinema_api.model.setting import Setting, SettingTypeEnum
from cinema_api.schemas.setting_schema import SettingCreate, SettingUpdate
from cinema_api.services.config import SchedulingConfig
from cinema_api.utils.config import settings

logger = logging.getLogger(__name__)

MIN_MINUTES_INTERVAL_SHOWTIME = "min_minutes_interval_showtime"
AMOUNT_MINUTES_SEAT_SELECTION = "amount_minutes_seat_selection"
MAX_NUMBER_TICKETS_PER_PURCHASE = "max_number_tickets_per_purchase"

_MISSING = object()


def parse_value(raw: str, type_: SettingTypeEnum) -> Any:
    if type_ == SettingTypeEnum.NUMBER:
        number = float(raw)
        return int(number) if number.is_integer() else number
    if type_ == SettingTypeEnum.JSON:
        return json.loads(raw)
    return str(raw)


class CRUDSetting(CRUDBase[Setting, SettingCreate, SettingUpdate]):
    """Settings table plus a read-through cache of parsed values.

    Writes made through this object drop the cache.
    """

    def __init__(self, model, id_field: str = "key"):
        super().__init__(model, id_field=id_field)
        self._cache: Dict[str, Any] = {}
        self._cache_lock = Lock()

    def invalidate(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def get_value(self, db: Session, key: str, default: Any = None) -> Any:
        key = key.lower()
        with self._cache_lock:
            cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            return default if cached is None else cached

        setting = db.query(Setting).filter(Setting.key == key).first()
        value = parse_value(setting.value, setting.type) if setting else None
        with self._cache_lock:
            self._cache[key] = value
        return default if value is None else value

    def load_scheduling_config(self, db: Session) -> SchedulingConfig:
        return SchedulingConfig(
            min_interval_minutes=int(self.get_value(db, MIN_MINUTES_INTERVAL_SHOWTIME, settings.MIN_MINUTES_INTERVAL_SHOWTIME)),
            seat_selection_window_minutes=int(self.get_value(db, AMOUNT_MINUTES_SEAT_SELECTION, settings.AMOUNT_MINUTES_SEAT_SELECTION)),
            max_tickets_per_purchase=int(self.get_value(db, MAX_NUMBER_TICKETS_PER_PURCHASE, settings.MAX_NUMBER_TICKETS_PER_PURCHASE)),
        )

    def create(self, db: Session, obj_in: SettingCreate):
        obj = super().create(db, obj_in)
        self.invalidate()
        logger.info("setting.created key=%s", obj.key)
        return obj

    def update(self, db: Session, db_obj: Setting, obj_in: Union[SettingUpdate, Dict[str, Any]]):
        obj = super().update(db, db_obj, obj_in)
        self.invalidate()
        logger.info("setting.updated key=%s", obj.key)
        return obj

    def remove(self, db: Session, id: str):
        result = super().remove(db, id)
        self.invalidate()
        return result


setting_crud = CRUDSetting(Setting, id_field="key")
