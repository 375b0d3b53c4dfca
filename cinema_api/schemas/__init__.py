from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


# Shared Pydantic base with ORM support (Pydantic v2)
class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# Enums shared across schemas
class PurchaseStatus(str, Enum):
    INITIATED = "initiated"
    CREATED = "created"
    EXECUTED = "executed"


class DiscountType(str, Enum):
    FLAT = "flat"
    PERCENT = "percent"


class SettingType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    JSON = "json"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
