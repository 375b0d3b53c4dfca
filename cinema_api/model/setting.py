from enum import Enum

from sqlalchemy import Column, DateTime, Enum as SAEnum, Integer, String, Text

from cinema_api.database import Base
from cinema_api.utils.helper import utcnow


class SettingTypeEnum(str, Enum):
    NUMBER = "number"
    STRING = "string"
    JSON = "json"


class Setting(Base):
    __tablename__ = "settings"

    setting_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    key = Column(String(50), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=False)
    type = Column(
        SAEnum(SettingTypeEnum, name="setting_type_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)
