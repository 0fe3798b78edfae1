from __future__ import annotations
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    id: int
    username: str
    gender: str | None = None
    birth_date: date | None = None
    height_cm: Decimal | None = None
    age: int | None = None
    latest_weight_kg: Decimal | None = None
    bmi: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)
