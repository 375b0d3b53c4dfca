from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import Field, field_validator, model_validator

from . import ORMModel, SettingType


def check_value(value: str, type_: SettingType) -> None:
    if type_ == SettingType.NUMBER:
        float(value)
    elif type_ == SettingType.JSON:
        json.loads(value)


class SettingBase(ORMModel):
    key: str = Field(..., max_length=50, pattern=r"^[^\s]+$")
    value: Union[str, int, float]
    type: SettingType

    @field_validator("key", mode="before")
    @classmethod
    def _normalize_key(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("value")
    @classmethod
    def _value_as_text(cls, v) -> str:
        return str(v)

    @model_validator(mode="after")
    def _value_matches_type(self):
        try:
            check_value(self.value, self.type)
        except ValueError:
            raise ValueError(f"value is not a valid {self.type.value}")
        return self


class SettingCreate(SettingBase):
    pass


class SettingUpdate(ORMModel):
    value: Optional[Union[str, int, float]] = None
    type: Optional[SettingType] = None

    @field_validator("value")
    @classmethod
    def _value_as_text(cls, v) -> Optional[str]:
        return None if v is None else str(v)


class SettingOut(ORMModel):
    setting_id: int
    key: str
    value: Any
    type: SettingType
    created_at: datetime
    updated_at: Optional[datetime] = None
