from fastapi import Depends
from sqlalchemy.orm import Session

from cinema_api.crud.setting_crud import setting_crud
from cinema_api.database import get_db
from cinema_api.services.config import SchedulingConfig
from cinema_api.services.purchase_service import PurchaseService
from cinema_api.services.showtime_service import ShowtimeService


def get_scheduling_config(db: Session = Depends(get_db)) -> SchedulingConfig:
    return setting_crud.load_scheduling_config(db)


def get_showtime_service(
    db: Session = Depends(get_db),
    config: SchedulingConfig = Depends(get_scheduling_config),
) -> ShowtimeService:
    return ShowtimeService(db, config)


def get_purchase_service(
    db: Session = Depends(get_db),
    config: SchedulingConfig = Depends(get_scheduling_config),
) -> PurchaseService:
    return PurchaseService(db, config)
